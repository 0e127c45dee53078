"""
Pydantic schemas for marketplace endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class MarketplaceWrite(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    short_name: str = Field(..., min_length=1, max_length=20)
    icon: str | None = Field(default=None, max_length=255)
    color: str | None = Field(default=None, max_length=20)
    # Country scopes this marketplace sells in, e.g. ["US", "DE"].
    countries: list[str] = Field(default_factory=list)
    fulfillment_options: list[str] = Field(default_factory=list)
    default_fulfillment: str | None = Field(default=None, max_length=20)
    is_active: bool = True
