"""Recipe (BOM) schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class RecipeLineCreate(BaseModel):
    """Recipe line creation schema."""

    item_id: int
    quantity_needed: Decimal = Field(gt=0)
    unit: str


class RecipeLineResponse(BaseModel):
    """Recipe line response schema."""

    id: int
    recipe_id: int
    item_id: int
    quantity_needed: Decimal
    unit: str

    model_config = {"from_attributes": True}


class RecipeBase(BaseModel):
    """Base recipe schema."""

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    making_charge: Decimal = Field(default=Decimal("0"), ge=0)


class RecipeCreate(RecipeBase):
    """Recipe creation schema."""

    lines: List[RecipeLineCreate] = Field(min_length=1)


class RecipeUpdate(BaseModel):
    """Recipe update schema. ``lines`` replaces the whole ingredient set."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    making_charge: Optional[Decimal] = Field(default=None, ge=0)
    lines: Optional[List[RecipeLineCreate]] = Field(default=None, min_length=1)


class RecipeResponse(RecipeBase):
    """Recipe response schema."""

    id: int
    total_cost_price: Decimal
    created_at: datetime
    updated_at: datetime
    lines: List[RecipeLineResponse] = []

    model_config = {"from_attributes": True}


class IngredientAvailabilityResponse(BaseModel):
    item_id: int
    item_name: str
    needed_per_unit: Decimal
    on_hand_base_units: Decimal
    base_unit: str
    unit_cost: Decimal
    sufficient: bool

    model_config = {"from_attributes": True}


class RecipeAvailabilityResponse(BaseModel):
    recipe_id: int
    recipe_name: str
    total_cost_price: Decimal
    makeable_units: Optional[int] = None
    ingredients: List[IngredientAvailabilityResponse] = []

    model_config = {"from_attributes": True}
