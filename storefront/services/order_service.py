from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog

from storefront.db.repositories import OrderRepository
from storefront.db.store import StoreTimeoutError
from storefront.models.schemas import CreateOrderRequest, Order, OrderStatus, UpdateOrderRequest
from storefront.services.spans import mark_failed, repository_span, tracer

logger = structlog.get_logger(__name__)


class OrderService:
    """Order use cases: one span per operation, a child span per store call.

    ``StoreTimeoutError`` is tagged on the span, logged and re-raised; retrying
    is left to the caller.
    """

    def __init__(self, repository: OrderRepository) -> None:
        self._repository = repository

    async def list_orders(self) -> list[Order]:
        with tracer.start_as_current_span("orders.list") as span:
            span.set_attribute("operation.type", "read")
            logger.info("order.list.attempt")
            with repository_span("orders.repository.list"):
                orders = await self._repository.get_all()
            span.set_attribute("result.count", len(orders))
            logger.info("order.list.success", count=len(orders))
            return orders

    async def get_order(self, order_id: str) -> Order | None:
        with tracer.start_as_current_span("orders.get") as span:
            span.set_attribute("operation.type", "read")
            span.set_attribute("order.id", order_id)
            logger.info("order.get.attempt", order_id=order_id)
            with repository_span("orders.repository.get", **{"order.id": order_id}):
                order = await self._repository.get_by_id(order_id)
            span.set_attribute("result.found", order is not None)
            if order is None:
                logger.warning("order.get.not_found", order_id=order_id)
            else:
                logger.info("order.get.success", order_id=order_id, status=order.status.value)
            return order

    async def create_order(self, request: CreateOrderRequest) -> Order:
        with tracer.start_as_current_span("orders.create") as span:
            order = Order(
                id=str(uuid.uuid4()),
                customer_id=request.customer_id,
                total=request.total,
                status=OrderStatus.PENDING,
                created_at=datetime.now(timezone.utc),
            )
            span.set_attribute("operation.type", "write")
            span.set_attribute("order.id", order.id)
            span.set_attribute("customer.id", order.customer_id)
            span.set_attribute("order.total", order.total)
            logger.info("order.create.attempt", order_id=order.id, customer_id=order.customer_id, total=order.total)

            try:
                with repository_span("orders.repository.save", **{"order.id": order.id}):
                    created = await self._repository.create(order)
            except StoreTimeoutError as exc:
                mark_failed(span, exc)
                logger.exception("order.create.failed", order_id=order.id)
                raise

            logger.info("order.create.success", order_id=created.id, status=created.status.value)
            return created

    async def search_orders(self, customer_id: str | None = None) -> list[Order]:
        with tracer.start_as_current_span("orders.search") as span:
            span.set_attribute("operation.type", "read")
            if customer_id and customer_id.strip():
                span.set_attribute("customer.id", customer_id)
            logger.info("order.search.attempt", customer_id=customer_id or "all")
            with repository_span("orders.repository.search"):
                orders = await self._repository.search(customer_id)
            span.set_attribute("result.count", len(orders))
            logger.info("order.search.success", count=len(orders))
            return orders

    async def update_order(self, order_id: str, request: UpdateOrderRequest) -> Order | None:
        with tracer.start_as_current_span("orders.update") as span:
            span.set_attribute("operation.type", "write")
            span.set_attribute("order.id", order_id)
            span.set_attribute("customer.id", request.customer_id)
            span.set_attribute("order.total", request.total)
            logger.info("order.update.attempt", order_id=order_id, customer_id=request.customer_id, total=request.total)

            replacement = Order(
                id=order_id,
                customer_id=request.customer_id,
                total=request.total,
                status=OrderStatus.PENDING,
                created_at=datetime.now(timezone.utc),
            )
            with repository_span("orders.repository.update", **{"order.id": order_id}):
                updated = await self._repository.update(order_id, replacement)

            span.set_attribute("result.found", updated is not None)
            if updated is None:
                logger.warning("order.update.not_found", order_id=order_id)
            else:
                logger.info("order.update.success", order_id=order_id)
            return updated

    async def delete_order(self, order_id: str) -> bool:
        with tracer.start_as_current_span("orders.delete") as span:
            span.set_attribute("operation.type", "write")
            span.set_attribute("order.id", order_id)
            logger.info("order.delete.attempt", order_id=order_id)
            with repository_span("orders.repository.delete", **{"order.id": order_id}):
                deleted = await self._repository.delete(order_id)
            span.set_attribute("result.found", deleted)
            if deleted:
                logger.info("order.delete.success", order_id=order_id)
            else:
                logger.warning("order.delete.not_found", order_id=order_id)
            return deleted
