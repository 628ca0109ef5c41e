"""Reporting Service - read-only views over the ledger and orders."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from kitchen_ledger.core.exceptions import OrderNotFoundError, RecipeNotFoundError
from kitchen_ledger.models.order import ACTIVE_STATUSES, Order, OrderStatus
from kitchen_ledger.models.recipe import Recipe
from kitchen_ledger.models.stocked_item import StockedItem
from kitchen_ledger.services.units import (
    base_unit_label,
    item_quantity_to_base_units,
    quantize,
    to_base_units,
)
from kitchen_ledger.services.valuation import average_cost_per_base_unit, on_hand_value

logger = logging.getLogger(__name__)


@dataclass
class LowStockEntry:
    item_id: int
    item_name: str
    on_hand_base_units: Decimal
    threshold_base_units: Decimal
    base_unit: str


@dataclass
class DashboardStats:
    total_items: int
    low_stock_count: int
    pending_orders: int
    active_orders: int
    inventory_value: Decimal


@dataclass
class OrderLineFinancials:
    recipe_id: int
    recipe_name: str
    quantity: int
    revenue: Decimal
    cost: Decimal


@dataclass
class OrderFinancials:
    order_id: int
    revenue: Decimal
    cost: Decimal
    lines: List[OrderLineFinancials] = field(default_factory=list)

    @property
    def profit(self) -> Decimal:
        return quantize(self.revenue - self.cost)


@dataclass
class IngredientAvailability:
    item_id: int
    item_name: str
    needed_per_unit: Decimal
    on_hand_base_units: Decimal
    base_unit: str
    unit_cost: Decimal

    @property
    def sufficient(self) -> bool:
        return self.on_hand_base_units >= self.needed_per_unit


@dataclass
class RecipeAvailability:
    recipe_id: int
    recipe_name: str
    total_cost_price: Decimal
    ingredients: List[IngredientAvailability] = field(default_factory=list)

    @property
    def makeable_units(self) -> Optional[int]:
        """Whole units that can be made from current stock; None if nothing is consumed."""
        consumed = [ing for ing in self.ingredients if ing.needed_per_unit > 0]
        if not consumed:
            return None
        return min(
            int((ing.on_hand_base_units / ing.needed_per_unit).to_integral_value(rounding=ROUND_FLOOR))
            for ing in consumed
        )


class ReportingService:
    def __init__(self, db: Session):
        self.db = db

    def low_stock_items(self) -> List[LowStockEntry]:
        """Items at or below their low-stock threshold. Informational only."""
        items = (
            self.db.query(StockedItem)
            .filter(StockedItem.low_stock_threshold.isnot(None))
            .order_by(StockedItem.name, StockedItem.id)
            .all()
        )
        entries = []
        for item in items:
            threshold = to_base_units(
                item.low_stock_threshold, item.low_stock_threshold_unit or item.unit
            )
            on_hand = Decimal(item.on_hand_base_units or 0)
            if on_hand <= threshold:
                entries.append(
                    LowStockEntry(
                        item_id=item.id,
                        item_name=item.name,
                        on_hand_base_units=quantize(on_hand),
                        threshold_base_units=quantize(threshold),
                        base_unit=base_unit_label(item.unit),
                    )
                )
        return entries

    def dashboard_stats(self) -> DashboardStats:
        items = self.db.query(StockedItem).all()
        status_counts: Dict[OrderStatus, int] = dict(
            self.db.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
        )
        return DashboardStats(
            total_items=len(items),
            low_stock_count=len(self.low_stock_items()),
            pending_orders=status_counts.get(OrderStatus.PENDING, 0),
            active_orders=sum(status_counts.get(status, 0) for status in ACTIVE_STATUSES),
            inventory_value=quantize(sum((on_hand_value(item) for item in items), Decimal("0"))),
        )

    def order_financials(self, order_id: int) -> OrderFinancials:
        """Revenue, cost at current recipe prices, and profit for an order."""
        order = self.db.get(Order, order_id)
        if not order:
            raise OrderNotFoundError(order_id)

        lines = []
        for line in order.lines:
            quantity = Decimal(line.quantity)
            lines.append(
                OrderLineFinancials(
                    recipe_id=line.recipe_id,
                    recipe_name=line.recipe.name,
                    quantity=line.quantity,
                    revenue=quantize(Decimal(line.selling_price) * quantity),
                    cost=quantize(Decimal(line.recipe.total_cost_price) * quantity),
                )
            )
        return OrderFinancials(
            order_id=order.id,
            revenue=quantize(sum((line.revenue for line in lines), Decimal("0"))),
            cost=quantize(sum((line.cost for line in lines), Decimal("0"))),
            lines=lines,
        )

    def recipe_availability(self, recipe_id: int) -> RecipeAvailability:
        recipe = self.db.get(Recipe, recipe_id)
        if not recipe:
            raise RecipeNotFoundError(recipe_id)

        needed: Dict[int, Decimal] = {}
        items: Dict[int, StockedItem] = {}
        for line in recipe.lines:
            item = line.item
            items[item.id] = item
            needed[item.id] = needed.get(item.id, Decimal("0")) + item_quantity_to_base_units(
                item, line.quantity_needed, line.unit
            )

        return RecipeAvailability(
            recipe_id=recipe.id,
            recipe_name=recipe.name,
            total_cost_price=recipe.total_cost_price,
            ingredients=[
                IngredientAvailability(
                    item_id=item_id,
                    item_name=items[item_id].name,
                    needed_per_unit=quantize(needed[item_id]),
                    on_hand_base_units=quantize(Decimal(items[item_id].on_hand_base_units or 0)),
                    base_unit=base_unit_label(items[item_id].unit),
                    unit_cost=average_cost_per_base_unit(items[item_id]),
                )
                for item_id in sorted(needed)
            ],
        )
