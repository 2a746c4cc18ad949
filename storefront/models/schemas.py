from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class OrderStatus(str, Enum):
    # Only PENDING is ever assigned; no status transitions exist.
    PENDING = "Pending"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    customer_id: str
    total: float
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    price: float
    stock_quantity: int
    created_at: datetime


class CreateOrderRequest(BaseModel):
    customer_id: str
    total: float


class UpdateOrderRequest(BaseModel):
    customer_id: str
    total: float


class CreateProductRequest(BaseModel):
    name: str
    description: str = ""
    price: float
    stock_quantity: int = 0


class UpdateProductRequest(BaseModel):
    name: str
    description: str = ""
    price: float
    stock_quantity: int = 0
