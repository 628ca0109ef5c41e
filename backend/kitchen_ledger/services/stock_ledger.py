"""Stock ledger primitives shared by the restock and order engines.

All on-hand changes go through apply_movement(), which refuses to take an
item below zero and records a StockMovement for every change. Callers are
expected to hold the item's row lock (see db.transaction.lock_rows).
"""

from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from kitchen_ledger.core.exceptions import InsufficientStockError
from kitchen_ledger.models.stock import MovementReason, StockMovement
from kitchen_ledger.models.stocked_item import StockedItem
from kitchen_ledger.services.units import base_unit_label, quantize


def on_hand(item: StockedItem) -> Decimal:
    return Decimal(item.on_hand_base_units or 0)


def ensure_sufficient(item: StockedItem, needed: Decimal) -> None:
    """Raise InsufficientStockError if ``needed`` base units exceed on-hand."""
    available = on_hand(item)
    if needed > available:
        raise InsufficientStockError(
            item.name,
            needed=quantize(needed),
            available=quantize(available),
            unit=base_unit_label(item.unit),
            item_id=item.id,
        )


def ensure_all_sufficient(items: Dict[int, StockedItem], requirements: Dict[int, Decimal]) -> None:
    """Check every requirement before anything is deducted, in item id order."""
    for item_id in sorted(requirements):
        ensure_sufficient(items[item_id], requirements[item_id])


def apply_movement(
    db: Session,
    item: StockedItem,
    qty_delta: Decimal,
    reason: MovementReason,
    cost_delta: Decimal = Decimal("0"),
    ref_type: Optional[str] = None,
    ref_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> StockMovement:
    """Change on-hand by ``qty_delta`` base units and record the movement."""
    qty_delta = quantize(Decimal(qty_delta))
    if qty_delta < 0:
        ensure_sufficient(item, -qty_delta)

    item.on_hand_base_units = quantize(on_hand(item) + qty_delta)

    movement = StockMovement(
        item_id=item.id,
        qty_delta=qty_delta,
        cost_delta=quantize(Decimal(cost_delta)),
        reason=reason.value,
        ref_type=ref_type,
        ref_id=ref_id,
        notes=notes,
    )
    db.add(movement)
    return movement


def movement_balance(db: Session, item_id: int) -> Decimal:
    """Sum of all recorded movements for an item; equals its on-hand."""
    total = (
        db.query(func.coalesce(func.sum(StockMovement.qty_delta), 0))
        .filter(StockMovement.item_id == item_id)
        .scalar()
    )
    return quantize(Decimal(str(total)))


def ledger_violations(item: StockedItem) -> List[str]:
    """Describe any broken ledger invariant on ``item``; empty when consistent."""
    violations = []
    if on_hand(item) < 0:
        violations.append(f"on_hand_base_units is negative ({item.on_hand_base_units})")
    if (item.cumulative_packs_purchased or 0) < 0:
        violations.append(f"cumulative_packs_purchased is negative ({item.cumulative_packs_purchased})")
    if Decimal(item.cumulative_cost_spent or 0) < 0:
        violations.append(f"cumulative_cost_spent is negative ({item.cumulative_cost_spent})")
    return violations
