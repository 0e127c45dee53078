"""
Field precedence for merging an incoming record into a stored one.

Two rules:
- FALLBACK: a non-null incoming value overwrites; null keeps the stored value.
- AUTHORITATIVE: an incoming value overwrites (null included) whenever the
  field was explicitly present in the incoming record.

Fields not named in a policy are never touched by an update.

The same table drives both the pure `resolve()` and the SQL `SET` clause used by
the upsert statements, so the database and the tests agree on the rules.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

FALLBACK = "fallback"
AUTHORITATIVE = "authoritative"

FieldPolicy = Mapping[str, str]

PRODUCT_FIELD_POLICY: FieldPolicy = {
    "name": AUTHORITATIVE,
    "category": AUTHORITATIVE,
    "base_cost": FALLBACK,
    "size": FALLBACK,
    "weight": FALLBACK,
    "width": FALLBACK,
    "height": FALLBACK,
    "length": FALLBACK,
    "product_sku": FALLBACK,
    "parent": FALLBACK,
}

MAPPING_FIELD_POLICY: FieldPolicy = {
    "status": AUTHORITATIVE,
    "asin": FALLBACK,
    "listing_price": FALLBACK,
    "fulfillment_type": FALLBACK,
}


def resolve(stored: Mapping[str, Any], incoming: Mapping[str, Any], policy: FieldPolicy) -> dict[str, Any]:
    """
    Merge `incoming` into a copy of `stored`, field by field.
    """
    merged = dict(stored)
    for field, rule in policy.items():
        if field not in incoming:
            continue
        value = incoming[field]
        if rule == AUTHORITATIVE or value is not None:
            merged[field] = value
    return merged


def present_authoritative(record: Mapping[str, Any], policy: FieldPolicy) -> frozenset[str]:
    return frozenset(f for f, rule in policy.items() if rule == AUTHORITATIVE and f in record)


def conflict_assignments(
    table: str,
    columns: Iterable[str],
    policy: FieldPolicy,
    *,
    present: frozenset[str],
) -> list[str]:
    """
    Build `ON CONFLICT DO UPDATE SET` assignments for the given insert columns.

    `present` is the set of authoritative fields the rows in this statement carry.
    """
    out: list[str] = []
    for col in columns:
        rule = policy.get(col)
        if rule is None:
            continue
        if rule == AUTHORITATIVE:
            if col in present:
                out.append(f"{col} = EXCLUDED.{col}")
        else:
            out.append(f"{col} = COALESCE(EXCLUDED.{col}, {table}.{col})")
    return out
