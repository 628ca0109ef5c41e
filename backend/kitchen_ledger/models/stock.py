"""StockMovement model - audit trail of every on-hand change."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kitchen_ledger.db.base import Base


class MovementReason(str, Enum):
    """Reasons for stock movements."""

    PURCHASE = "purchase"  # Restock
    RESERVATION = "reservation"  # Order entered ONGOING/COMPLETED
    RESERVATION_RELEASE = "reservation_release"  # Order cancelled, reverted or deleted


class StockMovement(Base):
    """Ledger of all on-hand changes.

    For every item, the sum of qty_delta equals on_hand_base_units.
    """

    __tablename__ = "stock_movements"

    id: Mapped[int] = mapped_column(primary_key=True)
    ts: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    item_id: Mapped[int] = mapped_column(
        ForeignKey("stocked_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    qty_delta: Mapped[Decimal] = mapped_column(Numeric(16, 4), nullable=False)
    cost_delta: Mapped[Decimal] = mapped_column(Numeric(14, 4), default=0, nullable=False)
    reason: Mapped[str] = mapped_column(String(50), nullable=False)
    ref_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)  # restock, order
    ref_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Relationships
    item: Mapped["StockedItem"] = relationship("StockedItem", back_populates="stock_movements")


# Forward references
from kitchen_ledger.models.stocked_item import StockedItem
