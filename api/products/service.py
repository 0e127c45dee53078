"""
Product business logic.

Bulk import flow:
1) Normalize names (trimmed display name + case-folded natural key)
2) Deduplicate by natural key, last occurrence wins
3) Apply in chunks; each chunk is one upsert transaction that merges per the
   product field policy and reports inserted vs updated per row
4) Record the outcome in import_history
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Sequence
from uuid import UUID

import asyncpg
from fastapi import HTTPException

from catalog import dedup, keys, upsert
from core.settings import env_int

from . import repository, schemas

DEFAULT_IMPORT_SOURCE = "csv"

logger = logging.getLogger(__name__)


def import_chunk_size() -> int:
    value = env_int("IMPORT_CHUNK_SIZE", upsert.DEFAULT_CHUNK_SIZE)
    if value <= 0:
        return upsert.DEFAULT_CHUNK_SIZE
    return value


@dataclass(frozen=True)
class BulkImportResult:
    added: int
    updated: int
    skipped: int
    failure: upsert.ChunkFailure | None = None


def effective_value(profile_value: Decimal | None, product_value: Decimal | None) -> Decimal | None:
    """
    Profile value when set, else the product's own value (mirrors the SQL projection).
    """
    return profile_value if profile_value is not None else product_value


def normalize_import_record(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Canonicalize one import record without dropping the caller's field presence.
    """
    record = dict(raw)
    name = keys.clean_text(record.get("name"))
    record["name"] = name
    record["name_key"] = keys.normalize_key(name)
    record["source"] = keys.clean_text(record.get("source")) or DEFAULT_IMPORT_SOURCE
    for field in ("category", "product_sku", "parent"):
        if field in record:
            record[field] = keys.clean_text(record[field])
    return record


def prepare_import(raw_records: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    normalized = [normalize_import_record(r) for r in raw_records]
    return dedup.dedupe_last_wins(normalized, key=lambda r: r["name_key"])


async def bulk_import(
    records: Sequence[schemas.ProductImportRecord],
    *,
    file_name: str | None = None,
) -> BulkImportResult:
    raw = [r.model_dump(exclude_unset=True) for r in records]
    unique = prepare_import(raw)
    skipped = len(raw) - len(unique)

    outcome = await upsert.run_chunked_upsert(
        unique,
        repository.upsert_products_chunk,
        chunk_size=import_chunk_size(),
        label="product_import",
    )
    result = BulkImportResult(
        added=outcome.created,
        updated=outcome.updated,
        skipped=skipped,
        failure=outcome.failure,
    )

    logger.info(
        "bulk_import_complete received=%s unique=%s added=%s updated=%s chunks=%s failed_chunk=%s",
        len(raw),
        len(unique),
        result.added,
        result.updated,
        outcome.chunks_applied,
        result.failure.chunk_index if result.failure else None,
    )

    if outcome.applied:
        await _record_history(result, file_name=file_name)
    return result


async def _record_history(result: BulkImportResult, *, file_name: str | None) -> None:
    try:
        await repository.insert_import_history(
            import_type="products_bulk",
            added=result.added,
            updated=result.updated,
            skipped=result.skipped,
            file_name=file_name,
        )
    except upsert.STORAGE_ERRORS:
        # History is informational; the import itself already committed.
        logger.exception("import_history_write_failed added=%s updated=%s", result.added, result.updated)


def _write_fields(payload: schemas.ProductWrite) -> dict[str, Any]:
    fields = payload.model_dump()
    name = keys.clean_text(fields["name"])
    if not name:
        raise HTTPException(status_code=422, detail="Product name is empty.")
    fields["name"] = name
    fields["name_key"] = keys.normalize_key(name)
    return fields


async def list_products() -> list[dict[str, Any]]:
    return await repository.list_products()


async def get_product(product_id: UUID) -> dict[str, Any]:
    row = await repository.get_product(product_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Product not found.")
    return row


async def create_product(payload: schemas.ProductWrite) -> dict[str, Any]:
    try:
        return await repository.create_product(_write_fields(payload))
    except asyncpg.UniqueViolationError as exc:
        raise HTTPException(status_code=409, detail="A product with this name already exists.") from exc


async def update_product(product_id: UUID, payload: schemas.ProductWrite) -> dict[str, Any]:
    try:
        row = await repository.update_product(product_id, _write_fields(payload))
    except asyncpg.UniqueViolationError as exc:
        raise HTTPException(status_code=409, detail="A product with this name already exists.") from exc
    if row is None:
        raise HTTPException(status_code=404, detail="Product not found.")
    return row


async def delete_product(product_id: UUID) -> None:
    row = await repository.delete_product(product_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Product not found.")


async def product_stats() -> dict[str, Any]:
    return await repository.product_stats()


async def list_categories() -> list[str]:
    return await repository.list_categories()
