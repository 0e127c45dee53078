"""
Product API endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/products")


@router.get("")
async def list_products() -> dict:
    rows = await service.list_products()
    return {"products": rows, "count": len(rows)}


@router.get("/stats/summary")
async def product_stats() -> dict:
    return await service.product_stats()


@router.get("/categories")
async def list_categories() -> dict:
    return {"categories": await service.list_categories()}


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
async def bulk_import(
    request: schemas.BulkImportRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    """
    Bulk insert-or-update products keyed by name.

    Chunks are committed one by one; a failing chunk stops the import and the
    chunks before it stay applied.
    """
    if not request.products:
        return {"added": 0, "updated": 0, "skipped": 0}

    result = await service.bulk_import(request.products, file_name=request.file_name)
    if result.failure is not None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": f"Import failed at chunk {result.failure.chunk_index}: {result.failure.message}",
                "failed_chunk": result.failure.chunk_index,
                "failed_offset": result.failure.offset,
                "added": result.added,
                "updated": result.updated,
            },
        )
    return {"added": result.added, "updated": result.updated, "skipped": result.skipped}


@router.get("/{product_id}")
async def get_product(product_id: UUID) -> dict:
    return await service.get_product(product_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    request: schemas.ProductWrite,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    return await service.create_product(request)


@router.put("/{product_id}")
async def update_product(
    product_id: UUID,
    request: schemas.ProductWrite,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    return await service.update_product(product_id, request)


@router.delete("/{product_id}")
async def delete_product(
    product_id: UUID,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    await service.delete_product(product_id)
    return {"ok": True, "product_id": str(product_id)}
