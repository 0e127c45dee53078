"""
SKU master reconciliation planning (pure, no I/O).

The sync job computes the target state of `sku_master` for one channel from
the mapping + product join, then diffs it against the rows currently stored:

- a target whose (sku, country_code) already has a row is a refresh, emitted
  only when a derived field differs; the pair is compared case-insensitively
  and the refresh is written to the stored row
- a target with no row is a backfill insert
- stored rows with no target (placeholders, orphans) are left alone

Running the plan twice over unchanged sources yields no writes the second time.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Iterable, Mapping

from catalog import keys

# Overwritten on refresh.
REFRESH_FIELDS: tuple[str, ...] = (
    "name",
    "parent",
    "category",
    "cost",
    "size",
    "custom_shipping",
    "fbm_source",
)

# Written only when the row is first inserted.
INSERT_ONLY_FIELDS: tuple[str, ...] = ("asin", "iwasku")

# keys.composite_key(sku, country_code)
SyncKey = str


@dataclass(frozen=True)
class SkuMasterTarget:
    sku: str
    country_code: str
    asin: str | None = None
    iwasku: str | None = None
    name: str | None = None
    parent: str | None = None
    category: str | None = None
    cost: Any = None
    size: Any = None
    custom_shipping: Any = None
    fbm_source: str | None = None

    @property
    def key(self) -> SyncKey:
        return keys.composite_key(self.sku, self.country_code)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SyncPlan:
    updates: list[SkuMasterTarget] = field(default_factory=list)
    inserts: list[SkuMasterTarget] = field(default_factory=list)
    unchanged: int = 0


def derive_parent(parent: str | None, product_sku: str | None) -> str | None:
    """
    The product's parent when set, else the product's own SKU code.
    """
    return keys.clean_text(parent) or keys.clean_text(product_sku)


def derive_target(source: Mapping[str, Any]) -> SkuMasterTarget | None:
    """
    Build the sku_master row for one mapping + product pair.

    Expected keys: sku, country_code, asin, product_sku, name, parent, category,
    base_cost, size, default_custom_shipping, default_fbm_source.
    Returns None when the mapping has no usable SKU or country.
    """
    sku = keys.clean_text(source.get("sku"))
    country_code = keys.country_code(source.get("country_code"))
    if not sku or not country_code:
        return None
    return SkuMasterTarget(
        sku=sku,
        country_code=country_code,
        asin=keys.clean_text(source.get("asin")),
        iwasku=keys.clean_text(source.get("product_sku")),
        name=source.get("name"),
        parent=derive_parent(source.get("parent"), source.get("product_sku")),
        category=source.get("category"),
        cost=source.get("base_cost"),
        size=source.get("size"),
        custom_shipping=source.get("default_custom_shipping"),
        fbm_source=source.get("default_fbm_source"),
    )


def build_targets(sources: Iterable[Mapping[str, Any]]) -> dict[SyncKey, SkuMasterTarget]:
    """
    One target per (sku, country_code) key; for duplicate mappings the later source wins.
    """
    targets: dict[SyncKey, SkuMasterTarget] = {}
    for source in sources:
        target = derive_target(source)
        if target is not None:
            targets[target.key] = target
    return targets


def needs_refresh(current: Mapping[str, Any], target: SkuMasterTarget) -> bool:
    return any(current.get(f) != getattr(target, f) for f in REFRESH_FIELDS)


def plan_sync(
    targets: Mapping[SyncKey, SkuMasterTarget],
    existing: Iterable[Mapping[str, Any]],
) -> SyncPlan:
    existing_by_key: dict[SyncKey, Mapping[str, Any]] = {
        keys.composite_key(row["sku"], row["country_code"]): row for row in existing
    }

    plan = SyncPlan()
    for key, target in targets.items():
        current = existing_by_key.get(key)
        if current is None:
            plan.inserts.append(target)
        elif needs_refresh(current, target):
            # Address the row as stored, e.g. a placeholder ingested as "x1"/"us".
            plan.updates.append(replace(target, sku=current["sku"], country_code=current["country_code"]))
        else:
            plan.unchanged += 1
    return plan
