"""
SKU mapping persistence (raw SQL over marketplace_product_data).
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from catalog import precedence
from core import db

UPSERT_COLUMNS = (
    "product_id",
    "marketplace_id",
    "country_code",
    "sku",
    "asin",
    "listing_price",
    "fulfillment_type",
    "status",
)


DEFAULT_STATUS = "active"


def upsert_sql(present: frozenset[str]) -> str:
    """
    Upsert statement for mappings carrying the given authoritative fields.

    `status` falls back to 'active' only when a new row is inserted; an update
    leaves the stored status alone unless the caller sent one.
    """
    assignments = precedence.conflict_assignments(
        "marketplace_product_data",
        UPSERT_COLUMNS,
        precedence.MAPPING_FIELD_POLICY,
        present=present,
    )
    assignments.append("updated_at = now()")
    set_clause = ",\n          ".join(assignments)
    return f"""
        INSERT INTO marketplace_product_data
          (product_id, marketplace_id, country_code, sku, asin, listing_price, fulfillment_type, status)
        VALUES ($1, $2, $3, $4, $5, $6, $7, COALESCE($8, '{DEFAULT_STATUS}'))
        ON CONFLICT (product_id, marketplace_id, country_code, sku) DO UPDATE SET
          {set_clause}
        RETURNING *, (xmax = 0) AS inserted
    """


async def list_for_product(product_id: UUID) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT
          mpd.*,
          m.name AS marketplace_name,
          m.short_name AS marketplace_short_name,
          m.icon AS marketplace_icon
        FROM marketplace_product_data mpd
        LEFT JOIN marketplaces m ON m.id = mpd.marketplace_id
        WHERE mpd.product_id = $1
        ORDER BY m.name, mpd.country_code
        """,
        product_id,
    )


async def list_for_marketplace(marketplace_id: UUID, *, country_code: str | None = None) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT
          mpd.*,
          p.name AS product_name,
          p.category AS product_category,
          p.base_cost AS product_base_cost
        FROM marketplace_product_data mpd
        LEFT JOIN products p ON p.id = mpd.product_id
        WHERE mpd.marketplace_id = $1
          AND ($2::text IS NULL OR mpd.country_code = $2)
        ORDER BY p.name, mpd.country_code
        """,
        marketplace_id,
        country_code,
    )


async def upsert_mapping(fields: dict[str, Any]) -> dict[str, Any]:
    """
    Insert-or-update one mapping. The returned row carries `inserted`.
    """
    present = precedence.present_authoritative(fields, precedence.MAPPING_FIELD_POLICY)
    row = await db.fetch_one(upsert_sql(present), *(fields.get(c) for c in UPSERT_COLUMNS))
    if row is None:
        raise RuntimeError("Failed to upsert SKU mapping.")
    return row


async def update_mapping(mapping_id: UUID, fields: dict[str, Any]) -> dict[str, Any] | None:
    """
    Partial edit: null arguments keep the stored value.
    """
    return await db.fetch_one(
        """
        UPDATE marketplace_product_data
        SET sku = COALESCE($2, sku),
            asin = COALESCE($3, asin),
            listing_price = COALESCE($4, listing_price),
            fulfillment_type = COALESCE($5, fulfillment_type),
            status = COALESCE($6, status),
            updated_at = now()
        WHERE id = $1
        RETURNING *
        """,
        mapping_id,
        fields.get("sku"),
        fields.get("asin"),
        fields.get("listing_price"),
        fields.get("fulfillment_type"),
        fields.get("status"),
    )


async def delete_mapping(mapping_id: UUID) -> dict[str, Any] | None:
    return await db.fetch_one(
        "DELETE FROM marketplace_product_data WHERE id = $1 RETURNING *",
        mapping_id,
    )


async def mapping_stats() -> dict[str, Any]:
    row = await db.fetch_one(
        """
        SELECT
          (SELECT count(*) FROM marketplace_product_data)::int AS total_skus,
          (SELECT count(DISTINCT product_id) FROM marketplace_product_data)::int AS products_with_skus,
          (SELECT count(DISTINCT marketplace_id) FROM marketplace_product_data)::int AS marketplaces_used,
          COALESCE(
            (
              SELECT jsonb_object_agg(COALESCE(m.short_name, 'Unknown'), counts.sku_count)
              FROM (
                SELECT marketplace_id, count(*) AS sku_count
                FROM marketplace_product_data
                GROUP BY marketplace_id
              ) counts
              LEFT JOIN marketplaces m ON m.id = counts.marketplace_id
            ),
            '{}'::jsonb
          )::text AS by_marketplace
        """
    )
    return row or {}


async def list_unmatched() -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT mpd.*, m.name AS marketplace_name
        FROM marketplace_product_data mpd
        LEFT JOIN marketplaces m ON m.id = mpd.marketplace_id
        WHERE mpd.product_id IS NULL
        ORDER BY mpd.created_at DESC
        """
    )


async def match_products_by_name(fragment: str, *, limit: int = 20) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, name, category, base_cost, size
        FROM products
        WHERE lower(name) LIKE ('%' || lower($1) || '%')
        ORDER BY name
        LIMIT $2
        """,
        fragment,
        limit,
    )


async def match_products_by_sku(sku: str, *, limit: int = 10) -> list[dict[str, Any]]:
    """
    Exact product_sku / name matches first, then partial name matches.
    """
    return await db.fetch_all(
        """
        SELECT id, name, category, base_cost, size, product_sku
        FROM products
        WHERE lower(name) LIKE ('%' || lower($1) || '%')
           OR lower(product_sku) = lower($1)
        ORDER BY
          CASE WHEN lower(product_sku) = lower($1) OR lower(name) = lower($1) THEN 0 ELSE 1 END,
          name
        LIMIT $2
        """,
        sku,
        limit,
    )
