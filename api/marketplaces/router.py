"""
Marketplace API endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/marketplaces")


@router.get("")
async def list_marketplaces() -> dict:
    rows = await service.list_marketplaces()
    return {"marketplaces": rows, "count": len(rows)}


@router.get("/{marketplace_id}")
async def get_marketplace(marketplace_id: UUID) -> dict:
    return await service.get_marketplace(marketplace_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_marketplace(
    request: schemas.MarketplaceWrite,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    return await service.create_marketplace(request)


@router.put("/{marketplace_id}")
async def update_marketplace(
    marketplace_id: UUID,
    request: schemas.MarketplaceWrite,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    return await service.update_marketplace(marketplace_id, request)


@router.delete("/{marketplace_id}")
async def delete_marketplace(
    marketplace_id: UUID,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    """
    Delete a marketplace together with its SKU mappings.
    """
    await service.delete_marketplace(marketplace_id)
    return {"ok": True, "marketplace_id": str(marketplace_id)}
