"""
SKU master orchestration.

- `sync_channel`: converge sku_master with mappings + products for one channel
  (refresh matched rows, then backfill missing ones) in one transaction
- `ingest_missing`: insert placeholder rows for externally observed SKUs
- `channel_listing`: the denormalized rows as consumed by the analyzer
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence

from catalog import keys
from core import db
from core.settings import env_str

from . import reconcile, repository, schemas

DEFAULT_CHANNEL = "amazon"
PLACEHOLDER_CATEGORY = "Unknown"

logger = logging.getLogger(__name__)


def sync_channel_name() -> str:
    return env_str("SYNC_CHANNEL", DEFAULT_CHANNEL).lower()


@dataclass(frozen=True)
class SyncResult:
    updated: int
    inserted: int
    total: int
    with_cost: int
    with_size: int

    @property
    def message(self) -> str:
        return (
            f"Synced {self.updated} updated, {self.inserted} new. "
            f"Total: {self.total} ({self.with_cost} with cost)"
        )

    def as_response(self) -> dict[str, Any]:
        return {
            "updated": self.updated,
            "inserted": self.inserted,
            "total": self.total,
            "withCost": self.with_cost,
            "withSize": self.with_size,
        }


async def sync_channel(channel: str) -> SyncResult:
    channel = keys.normalize_key(channel)
    if not channel:
        raise ValueError("channel is required")

    logger.info("sku_master_sync_start channel=%s", channel)

    async with db.transaction() as conn:
        sources = await repository.fetch_sync_sources(conn, channel)
        existing = await repository.fetch_channel_rows(conn, channel)
        plan = reconcile.plan_sync(reconcile.build_targets(sources), existing)

        # Refresh matched rows, then backfill the rest.
        updated = await repository.refresh_rows(conn, channel, plan.updates)
        inserted = await repository.insert_rows(conn, channel, plan.inserts)

    stats = await repository.channel_stats(channel)
    result = SyncResult(
        updated=updated,
        inserted=inserted,
        total=stats["total"],
        with_cost=stats["with_cost"],
        with_size=stats["with_size"],
    )
    logger.info(
        "sku_master_sync_complete channel=%s sources=%s updated=%s inserted=%s unchanged=%s "
        "skipped_inserts=%s total=%s",
        channel,
        len(sources),
        result.updated,
        result.inserted,
        plan.unchanged,
        len(plan.inserts) - inserted,
        result.total,
    )
    return result


async def ingest_missing(entries: Sequence[schemas.MissingSku], *, channel: str) -> dict[str, int]:
    """
    Insert placeholders for SKUs seen externally without a catalog match.

    Existing rows are never modified; refreshing them is the sync job's work.
    """
    added = 0
    skipped = 0

    for entry in entries:
        sku = keys.clean_text(entry.sku)
        country_code = keys.country_code(entry.marketplace)
        if not sku or not country_code:
            skipped += 1
            continue

        inserted = await repository.insert_placeholder(
            channel=channel,
            sku=sku,
            country_code=country_code,
            asin=keys.clean_text(entry.asin),
            name=keys.clean_text(entry.name) or sku,
            category=keys.clean_text(entry.category) or PLACEHOLDER_CATEGORY,
            fulfillment=keys.clean_text(entry.fulfillment),
        )
        if inserted:
            added += 1
        else:
            skipped += 1

    logger.info(
        "missing_skus_ingested channel=%s received=%s added=%s skipped=%s",
        channel,
        len(entries),
        added,
        skipped,
    )
    return {"added": added, "skipped": skipped, "total": len(entries)}


def _listing_item(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "sku": row["sku"],
        "asin": row.get("asin") or "",
        "name": row.get("name") or "",
        "parent": row.get("parent") or row.get("name") or "",
        "category": row.get("category") or "",
        "cost": row.get("cost"),
        "size": row.get("size"),
        "marketplace": row.get("country_code") or "",
        "customShipping": row.get("custom_shipping"),
        "fbmSource": row.get("fbm_source") or None,
        "fulfillment": row.get("fulfillment") or None,
    }


async def channel_listing(channel: str) -> dict[str, Any]:
    rows = await repository.list_channel_rows(channel)
    data = [_listing_item(r) for r in rows]
    with_cost = sum(1 for d in data if d["cost"] is not None)
    with_size = sum(1 for d in data if d["size"] is not None)
    logger.info("sku_master_listing channel=%s total=%s with_cost=%s with_size=%s", channel, len(data), with_cost, with_size)
    return {
        "data": data,
        "meta": {
            "total": len(data),
            "withCost": with_cost,
            "withSize": with_size,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }
