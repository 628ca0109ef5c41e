"""StockedItem model - the per-item purchase ledger and on-hand stock."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional, TYPE_CHECKING

from sqlalchemy import CheckConstraint, Enum as SQLEnum, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kitchen_ledger.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from kitchen_ledger.models.recipe import RecipeLine
    from kitchen_ledger.models.stock import StockMovement


class ItemClass(str, Enum):
    """What a purchased pack contains."""

    CONSUMABLE = "CONSUMABLE"  # Ingredients measured by mass, volume or count
    PACKAGING = "PACKAGING"  # Boxes, bags, labels; one pack is one piece


class StockedItem(Base, TimestampMixin):
    """A purchasable inventory unit.

    The ledger fields (cumulative_packs_purchased, cumulative_cost_spent) only
    ever grow, through restocks. on_hand_base_units is physical stock in the
    canonical base unit of the item's measurement family and is the only
    field order activity touches.
    """

    __tablename__ = "stocked_items"
    __table_args__ = (
        CheckConstraint("on_hand_base_units >= 0", name="ck_stocked_items_on_hand_non_negative"),
        CheckConstraint("cumulative_packs_purchased >= 0", name="ck_stocked_items_packs_non_negative"),
        CheckConstraint("cumulative_cost_spent >= 0", name="ck_stocked_items_cost_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    item_class: Mapped[ItemClass] = mapped_column(
        SQLEnum(ItemClass), default=ItemClass.CONSUMABLE, nullable=False
    )
    unit: Mapped[str] = mapped_column(String(20), nullable=False)  # GRAMS, KGS, LITERS, PIECES...
    pack_weight: Mapped[Decimal] = mapped_column(Numeric(12, 4), default=1, nullable=False)

    # Historical purchase ledger (never decreases)
    cumulative_packs_purchased: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cumulative_cost_spent: Mapped[Decimal] = mapped_column(Numeric(14, 4), default=0, nullable=False)

    # Physical stock in base units (g, ml or pcs)
    on_hand_base_units: Mapped[Decimal] = mapped_column(Numeric(16, 4), default=0, nullable=False)

    low_stock_threshold: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 4), nullable=True)
    low_stock_threshold_unit: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Optimistic concurrency: the mapper adds "AND version = ?" to every UPDATE
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    recipe_lines: Mapped[list["RecipeLine"]] = relationship("RecipeLine", back_populates="item")
    stock_movements: Mapped[list["StockMovement"]] = relationship(
        "StockMovement", back_populates="item", cascade="all, delete-orphan"
    )

    @property
    def has_purchase_history(self) -> bool:
        return (self.cumulative_packs_purchased or 0) > 0 or (self.cumulative_cost_spent or 0) > 0
