from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from storefront.db.store import StoreTimeoutError
from storefront.models.schemas import CreateOrderRequest, Order, UpdateOrderRequest
from storefront.services.dependencies import get_order_service
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])

UNAVAILABLE_DETAIL = "Service temporarily unavailable"


@router.get("", response_model=list[Order])
async def list_orders(service: OrderService = Depends(get_order_service)) -> list[Order]:
    return await service.list_orders()


@router.get("/search", response_model=list[Order])
async def search_orders(
    customer_id: str | None = None,
    service: OrderService = Depends(get_order_service),
) -> list[Order]:
    return await service.search_orders(customer_id)


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)) -> Order:
    order = await service.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("", response_model=Order, status_code=201)
async def create_order(
    payload: CreateOrderRequest,
    response: Response,
    service: OrderService = Depends(get_order_service),
) -> Order:
    try:
        order = await service.create_order(payload)
    except StoreTimeoutError as exc:
        raise HTTPException(status_code=503, detail=UNAVAILABLE_DETAIL) from exc
    response.headers["Location"] = f"/api/orders/{order.id}"
    return order


@router.put("/{order_id}", response_model=Order)
async def update_order(
    order_id: str,
    payload: UpdateOrderRequest,
    service: OrderService = Depends(get_order_service),
) -> Order:
    order = await service.update_order(order_id, payload)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.delete("/{order_id}", status_code=204)
async def delete_order(order_id: str, service: OrderService = Depends(get_order_service)) -> Response:
    if not await service.delete_order(order_id):
        raise HTTPException(status_code=404, detail="Order not found")
    return Response(status_code=204)
