"""Recipe (Bill of Materials) models."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kitchen_ledger.db.base import Base, TimestampMixin


class Recipe(Base, TimestampMixin):
    """A sellable product and the stocked items one unit of it consumes."""

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    making_charge: Mapped[Decimal] = mapped_column(Numeric(12, 4), default=0, nullable=False)

    # Derived by RecipeCostingService; never written by hand
    total_cost_price: Mapped[Decimal] = mapped_column(Numeric(14, 4), default=0, nullable=False)

    # Relationships
    lines: Mapped[list["RecipeLine"]] = relationship(
        "RecipeLine", back_populates="recipe", cascade="all, delete-orphan", order_by="RecipeLine.id"
    )


class RecipeLine(Base):
    """A single ingredient/component in a recipe."""

    __tablename__ = "recipe_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    recipe_id: Mapped[int] = mapped_column(
        ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[int] = mapped_column(
        ForeignKey("stocked_items.id"), nullable=False, index=True
    )
    quantity_needed: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)

    # Relationships
    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="lines")
    item: Mapped["StockedItem"] = relationship("StockedItem", back_populates="recipe_lines")


# Forward references
from kitchen_ledger.models.stocked_item import StockedItem
