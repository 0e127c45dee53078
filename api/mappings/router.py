"""
SKU mapping API endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/sku")


@router.get("/product/{product_id}")
async def list_for_product(product_id: UUID) -> dict:
    rows = await service.list_for_product(product_id)
    return {"mappings": rows, "count": len(rows)}


@router.get("/marketplace/{marketplace_id}")
async def list_for_marketplace(
    marketplace_id: UUID,
    country_code: str | None = Query(default=None, max_length=10),
) -> dict:
    rows = await service.list_for_marketplace(marketplace_id, country_code=country_code)
    return {"mappings": rows, "count": len(rows)}


@router.get("/stats")
async def mapping_stats() -> dict:
    return await service.mapping_stats()


@router.get("/unmatched")
async def list_unmatched() -> dict:
    rows = await service.list_unmatched()
    return {"mappings": rows, "count": len(rows)}


@router.get("/match")
async def match_products(
    q: str | None = Query(default=None, max_length=255),
    sku: str | None = Query(default=None, max_length=100),
) -> dict:
    rows = await service.match_products(q, sku)
    return {"products": rows, "count": len(rows)}


@router.post("")
async def create_mapping(
    request: schemas.MappingCreate,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    return await service.create_mapping(request)


@router.post("/bulk")
async def bulk_create(
    request: schemas.BulkMappingRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    return await service.bulk_create(request.mappings)


@router.put("/{mapping_id}")
async def update_mapping(
    mapping_id: UUID,
    request: schemas.MappingUpdate,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    return await service.update_mapping(mapping_id, request)


@router.delete("/{mapping_id}")
async def delete_mapping(
    mapping_id: UUID,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    row = await service.delete_mapping(mapping_id)
    return {"ok": True, "deleted": row}
