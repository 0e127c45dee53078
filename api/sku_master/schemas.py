"""
Pydantic schemas for SKU master endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class MissingSku(BaseModel):
    # Everything is optional here; entries without sku/marketplace are counted as skipped.
    sku: str | None = None
    asin: str | None = None
    name: str | None = None
    marketplace: str | None = Field(default=None, description="Country scope, e.g. US or DE.")
    category: str | None = None
    fulfillment: str | None = None


class MissingSkusRequest(BaseModel):
    skus: list[MissingSku]
