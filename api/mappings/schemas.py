"""
Pydantic schemas for SKU mapping (marketplace_product_data) endpoints.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class MappingCreate(BaseModel):
    product_id: UUID
    marketplace_id: UUID
    country_code: str = Field(..., min_length=1, max_length=10)
    sku: str = Field(..., min_length=1, max_length=100)
    asin: str | None = Field(default=None, max_length=20)
    listing_price: Decimal | None = None
    fulfillment_type: str | None = Field(default=None, max_length=20)
    # Left unset means "keep the stored status"; new rows default to active.
    status: str | None = Field(default=None, max_length=20)


class MappingUpdate(BaseModel):
    sku: str | None = Field(default=None, min_length=1, max_length=100)
    asin: str | None = Field(default=None, max_length=20)
    listing_price: Decimal | None = None
    fulfillment_type: str | None = Field(default=None, max_length=20)
    status: str | None = Field(default=None, max_length=20)


class BulkMappingRequest(BaseModel):
    # Items are validated one by one in the service so a bad row doesn't fail the batch.
    mappings: list[dict] = Field(..., min_length=1)
