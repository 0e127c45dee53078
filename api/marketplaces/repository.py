"""
Marketplace persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from core import db


async def list_marketplaces() -> list[dict[str, Any]]:
    return await db.fetch_all("SELECT * FROM marketplaces ORDER BY name")


async def get_marketplace(marketplace_id: UUID) -> dict[str, Any] | None:
    return await db.fetch_one("SELECT * FROM marketplaces WHERE id = $1", marketplace_id)


async def create_marketplace(fields: dict[str, Any]) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        INSERT INTO marketplaces (
          name, short_name, icon, color, countries, fulfillment_options, default_fulfillment, is_active
        )
        VALUES ($1, $2, $3, $4, $5::text[], $6::text[], $7, $8)
        RETURNING *
        """,
        fields["name"],
        fields["short_name"],
        fields.get("icon"),
        fields.get("color"),
        fields["countries"],
        fields["fulfillment_options"],
        fields.get("default_fulfillment"),
        fields["is_active"],
    )
    if row is None:
        raise RuntimeError("Failed to insert marketplace.")
    return row


async def update_marketplace(marketplace_id: UUID, fields: dict[str, Any]) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        UPDATE marketplaces
        SET name = $2,
            short_name = $3,
            icon = $4,
            color = $5,
            countries = $6::text[],
            fulfillment_options = $7::text[],
            default_fulfillment = $8,
            is_active = $9,
            updated_at = now()
        WHERE id = $1
        RETURNING *
        """,
        marketplace_id,
        fields["name"],
        fields["short_name"],
        fields.get("icon"),
        fields.get("color"),
        fields["countries"],
        fields["fulfillment_options"],
        fields.get("default_fulfillment"),
        fields["is_active"],
    )


async def delete_marketplace(marketplace_id: UUID) -> dict[str, Any] | None:
    # Mappings of this marketplace go with it (ON DELETE CASCADE).
    return await db.fetch_one("DELETE FROM marketplaces WHERE id = $1 RETURNING id", marketplace_id)
