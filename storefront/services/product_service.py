from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog

from storefront.db.repositories import ProductRepository
from storefront.db.store import StoreTimeoutError
from storefront.models.schemas import CreateProductRequest, Product, UpdateProductRequest
from storefront.services.spans import mark_failed, repository_span, tracer

logger = structlog.get_logger(__name__)


class ProductService:
    def __init__(self, repository: ProductRepository) -> None:
        self._repository = repository

    async def list_products(self) -> list[Product]:
        with tracer.start_as_current_span("products.list") as span:
            span.set_attribute("operation.type", "read")
            logger.info("product.list.attempt")
            with repository_span("products.repository.list"):
                products = await self._repository.get_all()
            span.set_attribute("result.count", len(products))
            logger.info("product.list.success", count=len(products))
            return products

    async def get_product(self, product_id: str) -> Product | None:
        with tracer.start_as_current_span("products.get") as span:
            span.set_attribute("operation.type", "read")
            span.set_attribute("product.id", product_id)
            logger.info("product.get.attempt", product_id=product_id)
            with repository_span("products.repository.get", **{"product.id": product_id}):
                product = await self._repository.get_by_id(product_id)
            span.set_attribute("result.found", product is not None)
            if product is None:
                logger.warning("product.get.not_found", product_id=product_id)
            else:
                logger.info("product.get.success", product_id=product_id)
            return product

    async def create_product(self, request: CreateProductRequest) -> Product:
        with tracer.start_as_current_span("products.create") as span:
            product = Product(
                id=str(uuid.uuid4()),
                name=request.name,
                description=request.description,
                price=request.price,
                stock_quantity=request.stock_quantity,
                created_at=datetime.now(timezone.utc),
            )
            span.set_attribute("operation.type", "write")
            span.set_attribute("product.id", product.id)
            span.set_attribute("product.name", product.name)
            span.set_attribute("product.price", product.price)
            logger.info("product.create.attempt", product_id=product.id, product_name=product.name, price=product.price)

            try:
                with repository_span("products.repository.save", **{"product.id": product.id}):
                    created = await self._repository.create(product)
            except StoreTimeoutError as exc:
                mark_failed(span, exc)
                logger.exception("product.create.failed", product_id=product.id)
                raise

            logger.info("product.create.success", product_id=created.id)
            return created

    async def search_products(self, name: str | None = None) -> list[Product]:
        with tracer.start_as_current_span("products.search") as span:
            span.set_attribute("operation.type", "read")
            if name:
                span.set_attribute("product.name", name)
            logger.info("product.search.attempt", name=name or "all")
            with repository_span("products.repository.search"):
                products = await self._repository.search(name)
            span.set_attribute("result.count", len(products))
            logger.info("product.search.success", count=len(products))
            return products

    async def update_product(self, product_id: str, request: UpdateProductRequest) -> Product | None:
        with tracer.start_as_current_span("products.update") as span:
            span.set_attribute("operation.type", "write")
            span.set_attribute("product.id", product_id)
            span.set_attribute("product.name", request.name)
            span.set_attribute("product.price", request.price)
            logger.info("product.update.attempt", product_id=product_id, product_name=request.name)

            replacement = Product(
                id=product_id,
                name=request.name,
                description=request.description,
                price=request.price,
                stock_quantity=request.stock_quantity,
                created_at=datetime.now(timezone.utc),
            )
            with repository_span("products.repository.update", **{"product.id": product_id}):
                updated = await self._repository.update(product_id, replacement)

            span.set_attribute("result.found", updated is not None)
            if updated is None:
                logger.warning("product.update.not_found", product_id=product_id)
            else:
                logger.info("product.update.success", product_id=product_id)
            return updated

    async def delete_product(self, product_id: str) -> bool:
        with tracer.start_as_current_span("products.delete") as span:
            span.set_attribute("operation.type", "write")
            span.set_attribute("product.id", product_id)
            logger.info("product.delete.attempt", product_id=product_id)
            with repository_span("products.repository.delete", **{"product.id": product_id}):
                deleted = await self._repository.delete(product_id)
            span.set_attribute("result.found", deleted)
            if deleted:
                logger.info("product.delete.success", product_id=product_id)
            else:
                logger.warning("product.delete.not_found", product_id=product_id)
            return deleted
