"""
Pydantic schemas for product endpoints.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class ProductImportRecord(BaseModel):
    """
    One externally sourced product row (CSV-derived or API payload).

    Only fields actually sent are treated as present; see `model_dump(exclude_unset=True)`.
    """

    name: str = Field(..., min_length=1, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    base_cost: Decimal | None = None
    size: Decimal | None = None
    weight: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    length: Decimal | None = None
    source: str | None = Field(default=None, max_length=50)
    product_sku: str | None = Field(default=None, max_length=100)
    parent: str | None = Field(default=None, max_length=255)


class BulkImportRequest(BaseModel):
    products: list[ProductImportRecord]
    file_name: str | None = Field(default=None, max_length=255)


class ProductWrite(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    base_cost: Decimal | None = None
    size: Decimal | None = None
    weight: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    length: Decimal | None = None
    cost_profile_id: UUID | None = None
    source: str | None = Field(default=None, max_length=50)
    product_sku: str | None = Field(default=None, max_length=100)
    parent: str | None = Field(default=None, max_length=255)
