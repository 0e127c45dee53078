"""
Product persistence (raw SQL).
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any
from uuid import UUID

from catalog import precedence
from core import db

# Effective values: cost profile first, then the product's own value.
PRODUCT_PROJECTION = """
  SELECT
    p.*,
    cp.name AS cost_profile_name,
    COALESCE(cp.base_cost, p.base_cost) AS effective_base_cost,
    COALESCE(cp.weight, p.weight) AS effective_weight,
    COALESCE(cp.width, p.width) AS effective_width,
    COALESCE(cp.height, p.height) AS effective_height,
    COALESCE(cp.length, p.length) AS effective_length,
    CASE
      WHEN cp.base_cost IS NOT NULL THEN 'profile'
      WHEN p.base_cost IS NOT NULL THEN 'product'
      ELSE NULL
    END AS cost_source
  FROM products p
  LEFT JOIN cost_profiles cp ON cp.id = p.cost_profile_id
"""

# (column, postgres array type) in insert order.
IMPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("name", "text"),
    ("name_key", "text"),
    ("category", "text"),
    ("base_cost", "numeric"),
    ("size", "numeric"),
    ("weight", "numeric"),
    ("width", "numeric"),
    ("height", "numeric"),
    ("length", "numeric"),
    ("source", "text"),
    ("product_sku", "text"),
    ("parent", "text"),
)


async def list_products() -> list[dict[str, Any]]:
    return await db.fetch_all(PRODUCT_PROJECTION + " ORDER BY p.updated_at DESC, p.id")


async def get_product(product_id: UUID) -> dict[str, Any] | None:
    return await db.fetch_one(PRODUCT_PROJECTION + " WHERE p.id = $1", product_id)


async def create_product(fields: dict[str, Any]) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        INSERT INTO products (
          name, name_key, category, base_cost, size, weight, width, height, length,
          cost_profile_id, source, product_sku, parent
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
        RETURNING *
        """,
        fields["name"],
        fields["name_key"],
        fields.get("category"),
        fields.get("base_cost"),
        fields.get("size"),
        fields.get("weight"),
        fields.get("width"),
        fields.get("height"),
        fields.get("length"),
        fields.get("cost_profile_id"),
        fields.get("source") or "manual",
        fields.get("product_sku"),
        fields.get("parent"),
    )
    if row is None:
        raise RuntimeError("Failed to insert product.")
    return row


async def update_product(product_id: UUID, fields: dict[str, Any]) -> dict[str, Any] | None:
    """
    Direct edit: every editable column is replaced with the supplied value.
    """
    return await db.fetch_one(
        """
        UPDATE products
        SET name = $2,
            name_key = $3,
            category = $4,
            base_cost = $5,
            size = $6,
            weight = $7,
            width = $8,
            height = $9,
            length = $10,
            cost_profile_id = $11,
            product_sku = $12,
            parent = $13,
            updated_at = now()
        WHERE id = $1
        RETURNING *
        """,
        product_id,
        fields["name"],
        fields["name_key"],
        fields.get("category"),
        fields.get("base_cost"),
        fields.get("size"),
        fields.get("weight"),
        fields.get("width"),
        fields.get("height"),
        fields.get("length"),
        fields.get("cost_profile_id"),
        fields.get("product_sku"),
        fields.get("parent"),
    )


async def delete_product(product_id: UUID) -> dict[str, Any] | None:
    return await db.fetch_one("DELETE FROM products WHERE id = $1 RETURNING id", product_id)


async def product_stats() -> dict[str, Any]:
    row = await db.fetch_one(
        """
        SELECT
          count(*)::int AS total_products,
          count(DISTINCT category)::int AS categories_count,
          max(updated_at) AS last_updated
        FROM products
        """
    )
    return row or {"total_products": 0, "categories_count": 0, "last_updated": None}


async def list_categories() -> list[str]:
    rows = await db.fetch_all(
        """
        SELECT DISTINCT category
        FROM products
        WHERE category IS NOT NULL
          AND category <> ''
        ORDER BY category
        """
    )
    return [str(r["category"]) for r in rows]


def _upsert_sql(present: frozenset[str]) -> str:
    columns = [c for c, _ in IMPORT_COLUMNS]
    unnest_args = ", ".join(f"${i}::{t}[]" for i, (_, t) in enumerate(IMPORT_COLUMNS, start=1))
    assignments = precedence.conflict_assignments(
        "products",
        columns,
        precedence.PRODUCT_FIELD_POLICY,
        present=present,
    )
    assignments.append("updated_at = now()")
    set_clause = ",\n          ".join(assignments)
    column_list = ", ".join(columns)
    return f"""
        INSERT INTO products ({column_list})
        SELECT * FROM UNNEST({unnest_args})
        ON CONFLICT (name_key) DO UPDATE SET
          {set_clause}
        RETURNING (xmax = 0) AS inserted
    """


async def upsert_products_chunk(chunk: list[dict[str, Any]]) -> list[bool]:
    """
    Insert-or-update one chunk of normalized import records in a single transaction.

    Rows are grouped by which authoritative fields they carry so each statement
    can use one SET clause. `xmax = 0` on the returned row means it was inserted.
    """
    groups: dict[frozenset[str], list[dict[str, Any]]] = defaultdict(list)
    for record in chunk:
        groups[precedence.present_authoritative(record, precedence.PRODUCT_FIELD_POLICY)].append(record)

    flags: list[bool] = []
    async with db.transaction() as conn:
        for present, records in groups.items():
            arrays = [[r.get(col) for r in records] for col, _ in IMPORT_COLUMNS]
            rows = await conn.fetch(_upsert_sql(present), *arrays)
            flags.extend(bool(r["inserted"]) for r in rows)
    return flags


async def insert_import_history(
    *,
    import_type: str,
    added: int,
    updated: int,
    skipped: int,
    platform: str | None = None,
    file_name: str | None = None,
) -> None:
    await db.execute(
        """
        INSERT INTO import_history (import_type, platform, products_added, products_updated, skipped_count, file_name)
        VALUES ($1, $2, $3, $4, $5, $6)
        """,
        import_type,
        platform,
        added,
        updated,
        skipped,
        file_name,
    )
