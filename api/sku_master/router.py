"""
SKU master API endpoints (analyzer channel).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/products/mapping/amazon-analyzer")


@router.get("")
async def channel_listing(_: dict = Depends(auth_dependencies.get_sso_user)) -> dict:
    return await service.channel_listing(service.sync_channel_name())


@router.post("/missing")
async def ingest_missing(
    request: schemas.MissingSkusRequest,
    _: dict = Depends(auth_dependencies.get_sso_user),
) -> dict:
    """
    Register SKUs the analyzer saw without a catalog match.
    """
    return await service.ingest_missing(request.skus, channel=service.sync_channel_name())


@router.post("/sync")
async def sync_channel(_: dict = Depends(auth_dependencies.require_admin)) -> dict:
    """
    Manual trigger: refresh sku_master from mappings + products.
    """
    result = await service.sync_channel(service.sync_channel_name())
    return {"data": result.as_response(), "message": result.message}
