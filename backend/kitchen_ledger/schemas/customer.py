"""Customer schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CustomerBase(BaseModel):
    """Base customer schema."""

    name: str = Field(min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = None


class CustomerCreate(CustomerBase):
    """Customer creation schema."""

    pass


class CustomerUpdate(BaseModel):
    """Customer update schema. An explicit null clears phone or address."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = None


class CustomerResponse(CustomerBase):
    """Customer response schema."""

    id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
