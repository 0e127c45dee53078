"""Field precedence merge rules and the SQL they compile to."""

from decimal import Decimal

from catalog import precedence
from catalog.precedence import PRODUCT_FIELD_POLICY, resolve

STORED = {
    "name": "Widget A",
    "category": "Tools",
    "base_cost": Decimal("3.50"),
    "size": Decimal("1.2"),
    "weight": Decimal("0.4"),
    "product_sku": "PX1",
    "parent": "P-PARENT",
    "source": "manual",
}


def test_null_fallback_fields_keep_stored_values():
    incoming = {"name": "Widget A", "base_cost": None, "size": None, "weight": None, "parent": None}
    merged = resolve(STORED, incoming, PRODUCT_FIELD_POLICY)

    for field in ("base_cost", "size", "weight", "parent"):
        assert merged[field] == STORED[field]


def test_non_null_fallback_fields_overwrite():
    merged = resolve(STORED, {"name": "Widget A", "base_cost": Decimal("5"), "parent": "P2"}, PRODUCT_FIELD_POLICY)
    assert merged["base_cost"] == Decimal("5")
    assert merged["parent"] == "P2"


def test_authoritative_field_overwritten_with_null_when_present():
    merged = resolve(STORED, {"name": "Widget A", "category": None}, PRODUCT_FIELD_POLICY)
    assert merged["category"] is None


def test_absent_authoritative_field_is_kept():
    merged = resolve(STORED, {"name": "widget a"}, PRODUCT_FIELD_POLICY)
    assert merged["category"] == "Tools"
    assert merged["name"] == "widget a"


def test_fields_outside_policy_untouched():
    merged = resolve(STORED, {"name": "Widget A", "source": "csv"}, PRODUCT_FIELD_POLICY)
    assert merged["source"] == "manual"


def test_resolve_does_not_mutate_inputs():
    stored = dict(STORED)
    resolve(stored, {"name": "x", "base_cost": Decimal("9")}, PRODUCT_FIELD_POLICY)
    assert stored == STORED


def test_present_authoritative():
    assert precedence.present_authoritative({"name": "a", "base_cost": 1}, PRODUCT_FIELD_POLICY) == {"name"}
    assert precedence.present_authoritative({"name": "a", "category": None}, PRODUCT_FIELD_POLICY) == {
        "name",
        "category",
    }


def test_conflict_assignments_follow_policy():
    columns = ["name", "name_key", "category", "base_cost", "source"]

    with_category = precedence.conflict_assignments(
        "products", columns, PRODUCT_FIELD_POLICY, present=frozenset({"name", "category"})
    )
    assert with_category == [
        "name = EXCLUDED.name",
        "category = EXCLUDED.category",
        "base_cost = COALESCE(EXCLUDED.base_cost, products.base_cost)",
    ]

    without_category = precedence.conflict_assignments(
        "products", columns, PRODUCT_FIELD_POLICY, present=frozenset({"name"})
    )
    assert "category = EXCLUDED.category" not in without_category
