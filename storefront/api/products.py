from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from storefront.api.orders import UNAVAILABLE_DETAIL
from storefront.db.store import StoreTimeoutError
from storefront.models.schemas import CreateProductRequest, Product, UpdateProductRequest
from storefront.services.dependencies import get_product_service
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=list[Product])
async def list_products(service: ProductService = Depends(get_product_service)) -> list[Product]:
    return await service.list_products()


@router.get("/search", response_model=list[Product])
async def search_products(
    name: str | None = None,
    service: ProductService = Depends(get_product_service),
) -> list[Product]:
    return await service.search_products(name)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)) -> Product:
    product = await service.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=201)
async def create_product(
    payload: CreateProductRequest,
    response: Response,
    service: ProductService = Depends(get_product_service),
) -> Product:
    try:
        product = await service.create_product(payload)
    except StoreTimeoutError as exc:
        raise HTTPException(status_code=503, detail=UNAVAILABLE_DETAIL) from exc
    response.headers["Location"] = f"/api/products/{product.id}"
    return product


@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    payload: UpdateProductRequest,
    service: ProductService = Depends(get_product_service),
) -> Product:
    product = await service.update_product(product_id, payload)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)) -> Response:
    if not await service.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=204)
