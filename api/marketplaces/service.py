"""
Marketplace business logic.

Channel tags used by the SKU master sync match a marketplace's name or short
name, so both are stored trimmed; country scopes are stored upper-case like
mapping country codes.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

import asyncpg
from fastapi import HTTPException

from catalog import keys

from . import repository, schemas


def _write_fields(payload: schemas.MarketplaceWrite) -> dict[str, Any]:
    fields = payload.model_dump()
    fields["name"] = keys.clean_text(fields["name"])
    fields["short_name"] = keys.clean_text(fields["short_name"])
    if not fields["name"] or not fields["short_name"]:
        raise HTTPException(status_code=422, detail="Marketplace name and short_name must not be blank.")

    countries: list[str] = []
    for raw in fields["countries"]:
        code = keys.country_code(raw)
        if code and code not in countries:
            countries.append(code)
    fields["countries"] = countries
    fields["fulfillment_options"] = [o for o in (keys.clean_text(v) for v in fields["fulfillment_options"]) if o]
    fields["icon"] = keys.clean_text(fields.get("icon"))
    fields["color"] = keys.clean_text(fields.get("color"))
    fields["default_fulfillment"] = keys.clean_text(fields.get("default_fulfillment"))
    return fields


async def list_marketplaces() -> list[dict[str, Any]]:
    return await repository.list_marketplaces()


async def get_marketplace(marketplace_id: UUID) -> dict[str, Any]:
    row = await repository.get_marketplace(marketplace_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Marketplace not found.")
    return row


async def create_marketplace(payload: schemas.MarketplaceWrite) -> dict[str, Any]:
    try:
        return await repository.create_marketplace(_write_fields(payload))
    except asyncpg.UniqueViolationError as exc:
        raise HTTPException(status_code=409, detail="A marketplace with this short name already exists.") from exc


async def update_marketplace(marketplace_id: UUID, payload: schemas.MarketplaceWrite) -> dict[str, Any]:
    try:
        row = await repository.update_marketplace(marketplace_id, _write_fields(payload))
    except asyncpg.UniqueViolationError as exc:
        raise HTTPException(status_code=409, detail="A marketplace with this short name already exists.") from exc
    if row is None:
        raise HTTPException(status_code=404, detail="Marketplace not found.")
    return row


async def delete_marketplace(marketplace_id: UUID) -> None:
    row = await repository.delete_marketplace(marketplace_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Marketplace not found.")
