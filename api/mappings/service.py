"""
SKU mapping business logic.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from uuid import UUID

from fastapi import HTTPException
from pydantic import ValidationError

from catalog import dedup, keys, upsert

from . import repository, schemas

logger = logging.getLogger(__name__)


def _mapping_fields(payload: schemas.MappingCreate) -> dict[str, Any]:
    # Only fields the caller sent; an unsent status must not reset the stored one.
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("status") is None:
        fields.pop("status", None)
    fields["country_code"] = keys.country_code(fields["country_code"])
    fields["sku"] = keys.clean_text(fields["sku"])
    fields["asin"] = keys.clean_text(fields.get("asin"))
    if not fields["country_code"] or not fields["sku"]:
        raise ValueError("country_code and sku must not be blank")
    return fields


MAPPING_KEY_FIELDS = ("product_id", "marketplace_id", "country_code", "sku")


def mapping_key(fields: dict[str, Any]) -> str:
    # Exact match: the unique constraint on marketplace_product_data is case-sensitive.
    return keys.KEY_DELIMITER.join(str(fields[f]) for f in MAPPING_KEY_FIELDS)


async def list_for_product(product_id: UUID) -> list[dict[str, Any]]:
    return await repository.list_for_product(product_id)


async def list_for_marketplace(marketplace_id: UUID, *, country_code: str | None = None) -> list[dict[str, Any]]:
    return await repository.list_for_marketplace(marketplace_id, country_code=keys.country_code(country_code))


async def create_mapping(payload: schemas.MappingCreate) -> dict[str, Any]:
    try:
        fields = _mapping_fields(payload)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    row = await repository.upsert_mapping(fields)
    row.pop("inserted", None)
    return row


async def update_mapping(mapping_id: UUID, payload: schemas.MappingUpdate) -> dict[str, Any]:
    row = await repository.update_mapping(mapping_id, payload.model_dump())
    if row is None:
        raise HTTPException(status_code=404, detail="SKU mapping not found.")
    return row


async def delete_mapping(mapping_id: UUID) -> dict[str, Any]:
    row = await repository.delete_mapping(mapping_id)
    if row is None:
        raise HTTPException(status_code=404, detail="SKU mapping not found.")
    return row


async def bulk_create(items: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Upsert mappings one by one; invalid or failing items are reported, not fatal.
    """
    created = 0
    updated = 0
    errors: list[str] = []

    valid: list[dict[str, Any]] = []
    for item in items:
        try:
            valid.append(_mapping_fields(schemas.MappingCreate.model_validate(item)))
        except (ValidationError, ValueError):
            errors.append(f"Missing required fields for SKU: {item.get('sku')}")

    for fields in dedup.dedupe_last_wins(valid, key=mapping_key):
        try:
            row = await repository.upsert_mapping(fields)
        except upsert.STORAGE_ERRORS as exc:
            errors.append(f"Error for SKU {fields['sku']}: {exc}")
            continue
        if row.get("inserted"):
            created += 1
        else:
            updated += 1

    logger.info("mapping_bulk_complete created=%s updated=%s errors=%s", created, updated, len(errors))
    return {"created": created, "updated": updated, "errors": errors}


async def mapping_stats() -> dict[str, Any]:
    row = dict(await repository.mapping_stats())
    by_marketplace = row.get("by_marketplace")
    if isinstance(by_marketplace, str):
        row["by_marketplace"] = json.loads(by_marketplace)
    return {
        "total_skus": int(row.get("total_skus") or 0),
        "products_with_skus": int(row.get("products_with_skus") or 0),
        "marketplaces_used": int(row.get("marketplaces_used") or 0),
        "by_marketplace": row.get("by_marketplace") or {},
    }


async def list_unmatched() -> list[dict[str, Any]]:
    return await repository.list_unmatched()


async def match_products(q: str | None, sku: str | None) -> list[dict[str, Any]]:
    sku = keys.clean_text(sku)
    q = keys.clean_text(q)
    if sku:
        return await repository.match_products_by_sku(sku)
    if q:
        return await repository.match_products_by_name(q)
    raise HTTPException(status_code=400, detail="q (search) or sku parameter required.")
