"""Customer model."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kitchen_ledger.db.base import Base, TimestampMixin


class Customer(Base, TimestampMixin):
    """Someone orders are made for; the phone is where confirmations go."""

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    orders: Mapped[list["Order"]] = relationship(
        "Order", back_populates="customer", order_by="Order.id"
    )


# Forward references
from kitchen_ledger.models.order import Order
