"""Order Stock Service - reserves and releases stock as orders change state.

Stock effects happen only on transitions into or out of the active set
(ONGOING, COMPLETED):

    PENDING  -> ONGOING/COMPLETED    reserve
    ONGOING <-> COMPLETED            nothing
    ONGOING/COMPLETED -> PENDING     release
    any -> CANCELLED                 release (if reserved)
    active order, new lines          release old, reserve new
    delete                           release (if reserved)

Reservation is all-or-nothing: requirements are aggregated per item over
every line, all rows are locked in ascending id order, every requirement is
checked, and only then is anything deducted. What was deducted is kept as
OrderReservation rows so a release credits back exactly that amount even
if a recipe was edited in between.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from kitchen_ledger.core.exceptions import (
    CustomerNotFoundError,
    IngredientNotFoundError,
    InvalidOrderTransitionError,
    InvalidQuantityError,
    OrderNotFoundError,
    RecipeNotFoundError,
)
from kitchen_ledger.db.transaction import lock_rows, run_in_transaction
from kitchen_ledger.models.customer import Customer
from kitchen_ledger.models.order import (
    ACTIVE_STATUSES,
    Order,
    OrderLine,
    OrderReservation,
    OrderStatus,
)
from kitchen_ledger.models.recipe import Recipe
from kitchen_ledger.models.stock import MovementReason
from kitchen_ledger.models.stocked_item import StockedItem
from kitchen_ledger.services.stock_ledger import apply_movement, ensure_all_sufficient
from kitchen_ledger.services.units import item_quantity_to_base_units, quantize

logger = logging.getLogger(__name__)


@dataclass
class OrderLineInput:
    recipe_id: int
    quantity: int
    selling_price: Decimal = Decimal("0")


def _validate_lines(lines: Optional[Sequence[OrderLineInput]]) -> None:
    for line in lines or []:
        if line.quantity is None or int(line.quantity) != line.quantity or line.quantity <= 0:
            raise InvalidQuantityError("quantity", line.quantity)
        if Decimal(line.selling_price) < 0:
            raise InvalidQuantityError("selling_price", line.selling_price)


class OrderStockService:
    """Service for order lifecycle and the stock reservations it drives."""

    def __init__(self, db: Session):
        self.db = db

    def get_order(self, order_id: int) -> Order:
        order = self.db.get(Order, order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders(self, status: Optional[OrderStatus] = None) -> List[Order]:
        query = self.db.query(Order)
        if status is not None:
            query = query.filter(Order.status == status)
        return query.order_by(Order.order_date.desc(), Order.id.desc()).all()

    # ===== REQUIREMENTS =====

    def compute_requirements(self, lines: Sequence) -> Dict[int, Decimal]:
        """Aggregate base units needed per stocked item over all order lines.

        ``lines`` may be OrderLine rows or OrderLineInput values; only
        ``recipe_id`` and ``quantity`` are read.
        """
        requirements: Dict[int, Decimal] = {}
        for line in lines:
            recipe = self.db.get(Recipe, line.recipe_id)
            if not recipe:
                raise RecipeNotFoundError(line.recipe_id)
            for recipe_line in recipe.lines:
                item = recipe_line.item
                if item is None:
                    raise IngredientNotFoundError(recipe_line.item_id)
                per_unit = item_quantity_to_base_units(
                    item, recipe_line.quantity_needed, recipe_line.unit
                )
                requirements[item.id] = requirements.get(item.id, Decimal("0")) + per_unit * Decimal(
                    line.quantity
                )
        return {item_id: quantize(qty) for item_id, qty in requirements.items()}

    # ===== RESERVE / RELEASE (join the caller's transaction) =====

    def reserve_for_order(self, order: Order) -> Dict[int, Decimal]:
        """Deduct the order's requirements from stock and snapshot them."""
        if order.stock_reserved:
            return {r.item_id: r.base_units for r in order.reservations}

        requirements = self.compute_requirements(order.lines)
        items = {item.id: item for item in lock_rows(self.db, StockedItem, requirements)}
        for item_id in requirements:
            if item_id not in items:
                raise IngredientNotFoundError(item_id)

        ensure_all_sufficient(items, requirements)

        for item_id in sorted(requirements):
            qty = requirements[item_id]
            apply_movement(
                self.db,
                items[item_id],
                -qty,
                MovementReason.RESERVATION,
                ref_type="order",
                ref_id=order.id,
            )
            order.reservations.append(OrderReservation(item_id=item_id, base_units=qty))

        order.stock_reserved = True
        self.db.flush()
        logger.info(f"Reserved stock for order {order.id}: {len(requirements)} item(s)")
        return requirements

    def release_for_order(self, order: Order) -> Dict[int, Decimal]:
        """Credit back exactly what the order's reservation deducted."""
        if not order.stock_reserved:
            return {}

        snapshot: Dict[int, Decimal] = {}
        for reservation in order.reservations:
            snapshot[reservation.item_id] = snapshot.get(reservation.item_id, Decimal("0")) + Decimal(
                reservation.base_units
            )

        items = {item.id: item for item in lock_rows(self.db, StockedItem, snapshot)}
        for item_id in sorted(snapshot):
            apply_movement(
                self.db,
                items[item_id],
                snapshot[item_id],
                MovementReason.RESERVATION_RELEASE,
                ref_type="order",
                ref_id=order.id,
            )

        order.reservations.clear()
        order.stock_reserved = False
        # Old snapshot rows must be gone before a new reservation inserts its own
        self.db.flush()
        logger.info(f"Released stock for order {order.id}: {len(snapshot)} item(s)")
        return snapshot

    # ===== LIFECYCLE =====

    def _lock_order(self, order_id: int) -> Order:
        locked = lock_rows(self.db, Order, [order_id])
        if not locked:
            raise OrderNotFoundError(order_id)
        return locked[0]

    def _get_customer(self, customer_id: int) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise CustomerNotFoundError(customer_id)
        return customer

    def _build_lines(self, lines: Sequence[OrderLineInput]) -> List[OrderLine]:
        built = []
        for line in lines:
            if not self.db.get(Recipe, line.recipe_id):
                raise RecipeNotFoundError(line.recipe_id)
            built.append(
                OrderLine(
                    recipe_id=line.recipe_id,
                    quantity=int(line.quantity),
                    selling_price=quantize(Decimal(line.selling_price)),
                )
            )
        return built

    def create_order(
        self,
        lines: Sequence[OrderLineInput],
        status: OrderStatus = OrderStatus.PENDING,
        customer_name: Optional[str] = None,
        order_date: Optional[datetime] = None,
        customer_id: Optional[int] = None,
    ) -> Order:
        """Create an order, optionally for a known customer.

        Without an explicit ``customer_name`` the customer's name is copied
        onto the order, so it survives the customer being deleted later.
        """
        status = OrderStatus(status)
        if status == OrderStatus.CANCELLED:
            raise InvalidOrderTransitionError(None, status.value)
        _validate_lines(lines)

        def operation() -> Order:
            order = Order(
                status=status,
                customer_name=customer_name,
                stock_reserved=False,
                lines=self._build_lines(lines),
            )
            if customer_id is not None:
                order.customer = self._get_customer(customer_id)
                if order.customer_name is None:
                    order.customer_name = order.customer.name
            if order_date is not None:
                order.order_date = order_date
            self.db.add(order)
            self.db.flush()

            if status in ACTIVE_STATUSES:
                self.reserve_for_order(order)
            return order

        order = run_in_transaction(self.db, operation, "create_order")
        logger.info(f"Created order {order.id} ({order.status.value}) with {len(order.lines)} line(s)")
        return order

    def update_order(
        self,
        order_id: int,
        status: Optional[OrderStatus] = None,
        lines: Optional[Sequence[OrderLineInput]] = None,
        customer_name: Optional[str] = None,
        customer_id: Optional[int] = None,
    ) -> Order:
        """Change status and/or replace the line set of an order.

        A failed reservation rolls back the whole update, leaving the order's
        previous reservation and lines untouched.
        """
        new_status = OrderStatus(status) if status is not None else None
        _validate_lines(lines)

        def operation() -> Order:
            order = self._lock_order(order_id)
            old_status = order.status
            target = new_status or old_status

            if old_status == OrderStatus.CANCELLED:
                if target == OrderStatus.CANCELLED and lines is None:
                    if customer_name is not None:
                        order.customer_name = customer_name
                    return order
                raise InvalidOrderTransitionError(old_status.value, target.value)

            was_active = old_status in ACTIVE_STATUSES
            will_be_active = target in ACTIVE_STATUSES
            lines_changed = lines is not None

            if was_active and (lines_changed or not will_be_active):
                self.release_for_order(order)

            if lines_changed:
                order.lines = self._build_lines(lines)
            if customer_id is not None:
                order.customer = self._get_customer(customer_id)
            if customer_name is not None:
                order.customer_name = customer_name
            order.status = target
            self.db.flush()

            if will_be_active and (lines_changed or not was_active):
                self.reserve_for_order(order)

            if old_status != target:
                logger.info(f"Order {order.id}: {old_status.value} -> {target.value}")
            return order

        return run_in_transaction(self.db, operation, "update_order")

    def cancel_order(self, order_id: int) -> Order:
        """Cancel an order, releasing any reservation. Cancelling twice is a no-op."""
        return self.update_order(order_id, status=OrderStatus.CANCELLED)

    def delete_order(self, order_id: int) -> None:
        def operation() -> None:
            order = self._lock_order(order_id)
            self.release_for_order(order)
            self.db.delete(order)

        run_in_transaction(self.db, operation, "delete_order")
        logger.info(f"Deleted order {order_id}")
