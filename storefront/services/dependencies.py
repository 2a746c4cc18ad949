from __future__ import annotations

from storefront.db.repositories import get_order_repository, get_product_repository
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService


def get_order_service() -> OrderService:
    return OrderService(get_order_repository())


def get_product_service() -> ProductService:
    return ProductService(get_product_repository())
