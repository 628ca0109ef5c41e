"""SQLAlchemy models."""

from kitchen_ledger.models.customer import Customer
from kitchen_ledger.models.stocked_item import ItemClass, StockedItem
from kitchen_ledger.models.stock import MovementReason, StockMovement
from kitchen_ledger.models.recipe import Recipe, RecipeLine
from kitchen_ledger.models.order import (
    ACTIVE_STATUSES,
    Order,
    OrderLine,
    OrderReservation,
    OrderStatus,
)

__all__ = [
    "Customer",
    "ItemClass",
    "StockedItem",
    "MovementReason",
    "StockMovement",
    "Recipe",
    "RecipeLine",
    "ACTIVE_STATUSES",
    "Order",
    "OrderLine",
    "OrderReservation",
    "OrderStatus",
]
