"""Restock and stock movement schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from kitchen_ledger.schemas.stocked_item import StockedItemResponse


class RestockRequest(BaseModel):
    """A purchase of one or more packs."""

    added_packs: int = Field(gt=0)
    added_cost: Decimal = Field(ge=0)
    added_pack_weight: Optional[Decimal] = Field(default=None, gt=0)
    added_unit: Optional[str] = None


class RestockResponse(BaseModel):
    item: StockedItemResponse
    packs_added: int
    base_units_added: Decimal
    cost_added: Decimal
    recosted_recipe_ids: List[int] = []


class StockMovementResponse(BaseModel):
    """Stock movement response schema."""

    id: int
    ts: datetime
    item_id: int
    qty_delta: Decimal
    cost_delta: Decimal
    reason: str
    ref_type: Optional[str] = None
    ref_id: Optional[int] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class LowStockItemResponse(BaseModel):
    item_id: int
    item_name: str
    on_hand_base_units: Decimal
    threshold_base_units: Decimal
    base_unit: str

    model_config = {"from_attributes": True}
