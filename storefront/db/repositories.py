from __future__ import annotations

from typing import Any, Generic, TypeVar

import structlog

from storefront.config import get_settings
from storefront.db.store import InMemoryStore, LatencyProfile, StoreTimeoutError
from storefront.models.schemas import Order, Product

logger = structlog.get_logger(__name__)

T = TypeVar("T", Order, Product)


class _Repository(Generic[T]):
    entity: str = ""

    def __init__(self, store: InMemoryStore[T]) -> None:
        self._store = store

    @property
    def store(self) -> InMemoryStore[T]:
        return self._store

    def _key(self, entity_id: str) -> dict[str, Any]:
        return {f"{self.entity}_id": entity_id}

    def _describe(self, value: T) -> dict[str, Any]:
        return {}

    async def get_by_id(self, entity_id: str) -> T | None:
        logger.info(f"{self.entity}_repository.fetching", **self._key(entity_id))
        value = await self._store.get(entity_id)
        if value is None:
            logger.warning(f"{self.entity}_repository.not_found", **self._key(entity_id))
        else:
            logger.info(f"{self.entity}_repository.found", **self._key(entity_id))
        return value

    async def create(self, value: T) -> T:
        logger.info(f"{self.entity}_repository.saving", **self._key(value.id), **self._describe(value))
        try:
            created = await self._store.create(value.id, value)
        except StoreTimeoutError:
            logger.error(f"{self.entity}_repository.timeout", **self._key(value.id))
            raise
        logger.info(f"{self.entity}_repository.saved", **self._key(value.id))
        return created

    async def update(self, entity_id: str, value: T) -> T | None:
        logger.info(f"{self.entity}_repository.updating", **self._key(entity_id), **self._describe(value))
        # The stored record always carries the id it is stored under.
        updated = await self._store.update(entity_id, value.model_copy(update={"id": entity_id}))
        if updated is None:
            logger.warning(f"{self.entity}_repository.update_not_found", **self._key(entity_id))
        else:
            logger.info(f"{self.entity}_repository.updated", **self._key(entity_id))
        return updated

    async def delete(self, entity_id: str) -> bool:
        logger.info(f"{self.entity}_repository.deleting", **self._key(entity_id))
        deleted = await self._store.delete(entity_id)
        if deleted:
            logger.info(f"{self.entity}_repository.deleted", **self._key(entity_id))
        else:
            logger.warning(f"{self.entity}_repository.delete_not_found", **self._key(entity_id))
        return deleted

    async def get_all(self) -> list[T]:
        logger.info(f"{self.entity}_repository.fetching_all")
        values = await self._store.list()
        logger.info(f"{self.entity}_repository.fetched_all", count=len(values))
        return values


class OrderRepository(_Repository[Order]):
    entity = "order"

    def __init__(self, store: InMemoryStore[Order] | None = None) -> None:
        super().__init__(store if store is not None else InMemoryStore("orders"))

    def _describe(self, value: Order) -> dict[str, Any]:
        return {"customer_id": value.customer_id, "total": value.total}

    async def search(self, customer_id: str | None = None) -> list[Order]:
        needle = (customer_id or "").strip()
        logger.info("order_repository.searching", customer_id=needle or "all")
        if needle:
            orders = await self._store.list(lambda order: order.customer_id == needle)
        else:
            orders = await self._store.list()
        logger.info("order_repository.matched", count=len(orders))
        return orders


class ProductRepository(_Repository[Product]):
    entity = "product"

    def __init__(self, store: InMemoryStore[Product] | None = None) -> None:
        super().__init__(store if store is not None else InMemoryStore("products"))

    def _describe(self, value: Product) -> dict[str, Any]:
        return {"product_name": value.name, "price": value.price}

    async def search(self, name: str | None = None) -> list[Product]:
        logger.info("product_repository.searching", name=name or "all")
        needle = (name or "").strip().lower()
        if needle:
            products = await self._store.list(lambda product: needle in product.name.lower())
        else:
            products = await self._store.list()
        logger.info("product_repository.matched", count=len(products))
        return products


_order_repository: OrderRepository | None = None
_product_repository: ProductRepository | None = None


def set_order_repository(repository: OrderRepository | None) -> None:
    global _order_repository
    _order_repository = repository


def get_order_repository() -> OrderRepository:
    global _order_repository
    if _order_repository is None:
        settings = get_settings()
        profile = LatencyProfile(failure_rate=settings.order_store_failure_rate, scale=settings.store_latency_scale)
        _order_repository = OrderRepository(InMemoryStore("orders", profile))
    return _order_repository


def set_product_repository(repository: ProductRepository | None) -> None:
    global _product_repository
    _product_repository = repository


def get_product_repository() -> ProductRepository:
    global _product_repository
    if _product_repository is None:
        settings = get_settings()
        profile = LatencyProfile(failure_rate=settings.product_store_failure_rate, scale=settings.store_latency_scale)
        _product_repository = ProductRepository(InMemoryStore("products", profile))
    return _product_repository
