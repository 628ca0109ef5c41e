"""Stocked item schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from kitchen_ledger.models.stocked_item import ItemClass


class StockedItemBase(BaseModel):
    """Base stocked item schema."""

    name: str = Field(min_length=1, max_length=255)
    low_stock_threshold: Optional[Decimal] = Field(default=None, ge=0)
    low_stock_threshold_unit: Optional[str] = None


class StockedItemCreate(StockedItemBase):
    """Stocked item creation schema. PACKAGING items always have a pack weight of 1."""

    item_class: ItemClass = ItemClass.CONSUMABLE
    unit: str
    pack_weight: Optional[Decimal] = Field(default=None, gt=0)


class StockedItemUpdate(BaseModel):
    """Stocked item update schema."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    unit: Optional[str] = None
    pack_weight: Optional[Decimal] = Field(default=None, gt=0)
    low_stock_threshold: Optional[Decimal] = Field(default=None, ge=0)
    low_stock_threshold_unit: Optional[str] = None


class StockedItemResponse(StockedItemBase):
    """Stocked item response schema."""

    id: int
    item_class: ItemClass
    unit: str
    pack_weight: Decimal
    cumulative_packs_purchased: int
    cumulative_cost_spent: Decimal
    on_hand_base_units: Decimal
    base_unit: str = ""
    average_cost_per_base_unit: Decimal = Decimal("0")
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
