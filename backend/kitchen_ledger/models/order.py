"""Customer order models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kitchen_ledger.db.base import Base, TimestampMixin


class OrderStatus(str, Enum):
    """Status of a customer order."""

    PENDING = "PENDING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Orders in these states hold a stock reservation
ACTIVE_STATUSES = frozenset({OrderStatus.ONGOING, OrderStatus.COMPLETED})


class Order(Base, TimestampMixin):
    """A customer order for one or more recipes."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True
    )
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True
    )
    order_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    # True exactly while order_reservations rows exist for this order
    stock_reserved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    customer: Mapped[Optional["Customer"]] = relationship("Customer", back_populates="orders")
    lines: Mapped[list["OrderLine"]] = relationship(
        "OrderLine", back_populates="order", cascade="all, delete-orphan", order_by="OrderLine.id"
    )
    reservations: Mapped[list["OrderReservation"]] = relationship(
        "OrderReservation",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderReservation.item_id",
    )

    @property
    def grand_total(self) -> Decimal:
        return sum((line.selling_price * line.quantity for line in self.lines), Decimal("0"))


class OrderLine(Base):
    """One recipe on an order."""

    __tablename__ = "order_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    recipe_id: Mapped[int] = mapped_column(ForeignKey("recipes.id"), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    selling_price: Mapped[Decimal] = mapped_column(Numeric(12, 4), default=0, nullable=False)

    # Relationships
    order: Mapped["Order"] = relationship("Order", back_populates="lines")
    recipe: Mapped["Recipe"] = relationship("Recipe")


class OrderReservation(Base):
    """Base units deducted from one item when the order became active.

    Release credits back exactly these amounts, independent of later recipe edits.
    """

    __tablename__ = "order_reservations"
    __table_args__ = (
        UniqueConstraint("order_id", "item_id", name="uq_reservation_order_item"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[int] = mapped_column(
        ForeignKey("stocked_items.id"), nullable=False, index=True
    )
    base_units: Mapped[Decimal] = mapped_column(Numeric(16, 4), nullable=False)

    # Relationships
    order: Mapped["Order"] = relationship("Order", back_populates="reservations")
    item: Mapped["StockedItem"] = relationship("StockedItem")


# Forward references
from kitchen_ledger.models.customer import Customer
from kitchen_ledger.models.recipe import Recipe
from kitchen_ledger.models.stocked_item import StockedItem
