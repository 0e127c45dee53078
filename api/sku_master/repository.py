"""
SKU master persistence (raw SQL).

The sync functions take an explicit connection so the whole run (read sources,
read current rows, refresh, backfill) happens inside one transaction.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

from .reconcile import SkuMasterTarget

# Mapping + product pairs for one channel. Channel tags match the marketplace
# name or short name, case-insensitively.
SYNC_SOURCES_SQL = """
  SELECT
    mpd.sku,
    mpd.country_code,
    mpd.asin,
    p.product_sku,
    p.name,
    p.parent,
    p.category,
    p.base_cost,
    p.size,
    p.default_custom_shipping,
    p.default_fbm_source
  FROM marketplace_product_data mpd
  JOIN products p ON p.id = mpd.product_id
  JOIN marketplaces m ON m.id = mpd.marketplace_id
  WHERE (lower(m.name) = $1 OR lower(m.short_name) = $1)
    AND mpd.sku IS NOT NULL
    AND btrim(mpd.sku) <> ''
  ORDER BY mpd.updated_at, mpd.id
"""


async def fetch_sync_sources(conn: asyncpg.Connection, channel: str) -> list[dict[str, Any]]:
    rows = await conn.fetch(SYNC_SOURCES_SQL, channel.lower())
    return [dict(r) for r in rows]


async def fetch_channel_rows(conn: asyncpg.Connection, channel: str) -> list[dict[str, Any]]:
    rows = await conn.fetch(
        """
        SELECT sku, country_code, name, parent, category, cost, size, custom_shipping, fbm_source
        FROM sku_master
        WHERE marketplace = $1
        """,
        channel,
    )
    return [dict(r) for r in rows]


async def refresh_rows(conn: asyncpg.Connection, channel: str, targets: list[SkuMasterTarget]) -> int:
    """
    Overwrite derived fields of existing rows. Returns the number of rows written.
    """
    if not targets:
        return 0
    rows = await conn.fetch(
        """
        UPDATE sku_master sm
        SET name = t.name,
            parent = t.parent,
            category = t.category,
            cost = t.cost,
            size = t.size,
            custom_shipping = t.custom_shipping,
            fbm_source = t.fbm_source,
            updated_at = now()
        FROM UNNEST(
          $2::text[], $3::text[], $4::text[], $5::text[], $6::text[],
          $7::numeric[], $8::numeric[], $9::numeric[], $10::text[]
        ) AS t(sku, country_code, name, parent, category, cost, size, custom_shipping, fbm_source)
        WHERE sm.marketplace = $1
          AND sm.sku = t.sku
          AND sm.country_code = t.country_code
        RETURNING sm.id
        """,
        channel,
        [t.sku for t in targets],
        [t.country_code for t in targets],
        [t.name for t in targets],
        [t.parent for t in targets],
        [t.category for t in targets],
        [t.cost for t in targets],
        [t.size for t in targets],
        [t.custom_shipping for t in targets],
        [t.fbm_source for t in targets],
    )
    return len(rows)


async def insert_rows(conn: asyncpg.Connection, channel: str, targets: list[SkuMasterTarget]) -> int:
    """
    Backfill rows for mappings without one. A row inserted concurrently wins.
    """
    if not targets:
        return 0
    rows = await conn.fetch(
        """
        INSERT INTO sku_master (
          sku, marketplace, country_code, asin, iwasku, name, parent, category,
          cost, size, custom_shipping, fbm_source
        )
        SELECT
          t.sku, $1, t.country_code, t.asin, t.iwasku, t.name, t.parent, t.category,
          t.cost, t.size, t.custom_shipping, t.fbm_source
        FROM UNNEST(
          $2::text[], $3::text[], $4::text[], $5::text[], $6::text[], $7::text[], $8::text[],
          $9::numeric[], $10::numeric[], $11::numeric[], $12::text[]
        ) AS t(sku, country_code, asin, iwasku, name, parent, category, cost, size, custom_shipping, fbm_source)
        ON CONFLICT (sku, marketplace, country_code) DO NOTHING
        RETURNING id
        """,
        channel,
        [t.sku for t in targets],
        [t.country_code for t in targets],
        [t.asin for t in targets],
        [t.iwasku for t in targets],
        [t.name for t in targets],
        [t.parent for t in targets],
        [t.category for t in targets],
        [t.cost for t in targets],
        [t.size for t in targets],
        [t.custom_shipping for t in targets],
        [t.fbm_source for t in targets],
    )
    return len(rows)


async def channel_stats(channel: str) -> dict[str, int]:
    row = await db.fetch_one(
        """
        SELECT
          count(*)::int AS total,
          count(cost)::int AS with_cost,
          count(size)::int AS with_size
        FROM sku_master
        WHERE marketplace = $1
        """,
        channel,
    )
    row = row or {}
    return {
        "total": int(row.get("total") or 0),
        "with_cost": int(row.get("with_cost") or 0),
        "with_size": int(row.get("with_size") or 0),
    }


async def insert_placeholder(
    *,
    channel: str,
    sku: str,
    country_code: str,
    asin: str | None,
    name: str,
    category: str,
    fulfillment: str | None,
) -> bool:
    """
    Insert a placeholder row; an existing row for the key is left untouched.

    The key matches existing rows case-insensitively. Returns True when a row
    was inserted.
    """
    row = await db.fetch_one(
        """
        INSERT INTO sku_master (sku, marketplace, country_code, asin, name, category, fulfillment)
        SELECT $1::text, $2::text, $3::text, $4::text, $5::text, $6::text, $7::text
        WHERE NOT EXISTS (
          SELECT 1
          FROM sku_master
          WHERE marketplace = $2
            AND lower(sku) = lower($1)
            AND upper(country_code) = upper($3)
        )
        ON CONFLICT (sku, marketplace, country_code) DO NOTHING
        RETURNING id
        """,
        sku,
        channel,
        country_code,
        asin,
        name,
        category,
        fulfillment,
    )
    return row is not None


async def list_channel_rows(channel: str) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT
          sku,
          asin,
          country_code,
          name,
          parent,
          category,
          cost,
          size,
          custom_shipping,
          fbm_source,
          fulfillment
        FROM sku_master
        WHERE marketplace = $1
        ORDER BY country_code, sku
        """,
        channel,
    )
