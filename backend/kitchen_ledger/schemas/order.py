"""Order schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from kitchen_ledger.models.order import OrderStatus


class OrderLineCreate(BaseModel):
    """Order line creation schema."""

    recipe_id: int
    quantity: int = Field(gt=0)
    selling_price: Decimal = Field(default=Decimal("0"), ge=0)


class OrderLineResponse(BaseModel):
    """Order line response schema."""

    id: int
    recipe_id: int
    quantity: int
    selling_price: Decimal

    model_config = {"from_attributes": True}


class OrderCreate(BaseModel):
    """Order creation schema."""

    customer_id: Optional[int] = None
    customer_name: Optional[str] = Field(default=None, max_length=255)
    status: OrderStatus = OrderStatus.PENDING
    order_date: Optional[datetime] = None
    lines: List[OrderLineCreate] = Field(min_length=1)


class OrderUpdate(BaseModel):
    """Order update schema. ``lines`` replaces the whole line set."""

    customer_id: Optional[int] = None
    customer_name: Optional[str] = Field(default=None, max_length=255)
    status: Optional[OrderStatus] = None
    lines: Optional[List[OrderLineCreate]] = Field(default=None, min_length=1)


class OrderReservationResponse(BaseModel):
    item_id: int
    base_units: Decimal

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    """Order response schema."""

    id: int
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    status: OrderStatus
    order_date: datetime
    stock_reserved: bool
    grand_total: Decimal
    created_at: datetime
    updated_at: datetime
    lines: List[OrderLineResponse] = []
    reservations: List[OrderReservationResponse] = []

    model_config = {"from_attributes": True}


class OrderLineFinancialsResponse(BaseModel):
    recipe_id: int
    recipe_name: str
    quantity: int
    revenue: Decimal
    cost: Decimal

    model_config = {"from_attributes": True}


class OrderFinancialsResponse(BaseModel):
    order_id: int
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    lines: List[OrderLineFinancialsResponse] = []

    model_config = {"from_attributes": True}
