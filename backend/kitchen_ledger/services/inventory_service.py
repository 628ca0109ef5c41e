"""Inventory Service - the catalogue of stocked items.

Items are created with an empty ledger; stock and cost only ever arrive
through RestockService. The pack definition (unit, pack_weight) is the WAC
denominator, so it is frozen once anything has been bought.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from kitchen_ledger.core.exceptions import (
    IncompatibleUnitError,
    InvalidQuantityError,
    ItemNotFoundError,
    LedgerNotEmptyError,
    ReferenceInUseError,
)
from kitchen_ledger.db.transaction import run_in_transaction
from kitchen_ledger.models.order import OrderReservation
from kitchen_ledger.models.recipe import RecipeLine
from kitchen_ledger.models.stocked_item import ItemClass, StockedItem
from kitchen_ledger.services.units import (
    MeasurementUnit,
    ensure_compatible,
    is_count_unit,
    parse_unit,
    quantize,
)

logger = logging.getLogger(__name__)

_UNSET = object()


class InventoryService:
    """Service for creating, editing and removing stocked items."""

    def __init__(self, db: Session):
        self.db = db

    def get_item(self, item_id: int) -> StockedItem:
        item = self.db.get(StockedItem, item_id)
        if not item:
            raise ItemNotFoundError(item_id)
        return item

    def list_items(self, item_class: Optional[ItemClass] = None) -> List[StockedItem]:
        query = self.db.query(StockedItem)
        if item_class is not None:
            query = query.filter(StockedItem.item_class == item_class)
        return query.order_by(StockedItem.name, StockedItem.id).all()

    def _pack_definition(self, item_class: ItemClass, unit, pack_weight):
        unit = parse_unit(unit)
        if item_class == ItemClass.PACKAGING:
            if not is_count_unit(unit):
                raise IncompatibleUnitError(unit.value, MeasurementUnit.PIECES.value)
            return unit, Decimal("1")
        if pack_weight is None or Decimal(pack_weight) <= 0:
            raise InvalidQuantityError("pack_weight", pack_weight)
        return unit, quantize(Decimal(pack_weight))

    def _threshold(self, unit, threshold, threshold_unit):
        if threshold is None:
            return None, None
        if Decimal(threshold) < 0:
            raise InvalidQuantityError("low_stock_threshold", threshold)
        threshold_unit = parse_unit(threshold_unit or unit)
        ensure_compatible(threshold_unit, unit)
        return quantize(Decimal(threshold)), threshold_unit.value

    def create_item(
        self,
        name: str,
        unit: str,
        item_class: ItemClass = ItemClass.CONSUMABLE,
        pack_weight: Optional[Decimal] = None,
        low_stock_threshold: Optional[Decimal] = None,
        low_stock_threshold_unit: Optional[str] = None,
    ) -> StockedItem:
        item_class = ItemClass(item_class)
        parsed_unit, weight = self._pack_definition(item_class, unit, pack_weight)
        threshold, threshold_unit = self._threshold(
            parsed_unit, low_stock_threshold, low_stock_threshold_unit
        )

        def operation() -> StockedItem:
            item = StockedItem(
                name=name,
                item_class=item_class,
                unit=parsed_unit.value,
                pack_weight=weight,
                cumulative_packs_purchased=0,
                cumulative_cost_spent=Decimal("0"),
                on_hand_base_units=Decimal("0"),
                low_stock_threshold=threshold,
                low_stock_threshold_unit=threshold_unit,
            )
            self.db.add(item)
            self.db.flush()
            return item

        item = run_in_transaction(self.db, operation, "create_item")
        logger.info(f"Created stocked item {item.id} '{item.name}' ({item.item_class.value}, {item.unit})")
        return item

    def update_item(
        self,
        item_id: int,
        name: Optional[str] = None,
        unit: Optional[str] = None,
        pack_weight: Optional[Decimal] = None,
        low_stock_threshold=_UNSET,
        low_stock_threshold_unit: Optional[str] = None,
    ) -> StockedItem:
        """Edit an item. Passing ``low_stock_threshold=None`` clears the threshold."""

        def operation() -> StockedItem:
            item = self.get_item(item_id)

            if name is not None:
                item.name = name

            if unit is not None or pack_weight is not None:
                new_unit, new_weight = self._pack_definition(
                    item.item_class,
                    unit if unit is not None else item.unit,
                    pack_weight if pack_weight is not None else item.pack_weight,
                )
                changed = new_unit.value != item.unit or new_weight != Decimal(item.pack_weight)
                if changed and (item.has_purchase_history or Decimal(item.on_hand_base_units or 0) != 0):
                    raise LedgerNotEmptyError(item.name)
                if changed and new_unit.value != item.unit and item.recipe_lines:
                    # Recipe lines are quoted against the item's unit family
                    ensure_compatible(new_unit, item.unit, item.name)
                item.unit = new_unit.value
                item.pack_weight = new_weight

            if low_stock_threshold is not _UNSET:
                item.low_stock_threshold, item.low_stock_threshold_unit = self._threshold(
                    item.unit, low_stock_threshold, low_stock_threshold_unit
                )
            elif low_stock_threshold_unit is not None and item.low_stock_threshold is not None:
                item.low_stock_threshold, item.low_stock_threshold_unit = self._threshold(
                    item.unit, item.low_stock_threshold, low_stock_threshold_unit
                )

            self.db.flush()
            return item

        item = run_in_transaction(self.db, operation, "update_item")
        logger.info(f"Updated stocked item {item.id} '{item.name}'")
        return item

    def delete_item(self, item_id: int) -> None:
        def operation() -> None:
            item = self.get_item(item_id)
            in_use = self.db.query(RecipeLine).filter(RecipeLine.item_id == item_id).count()
            if in_use:
                raise ReferenceInUseError("Stocked item", item_id, f"{in_use} recipe line(s)")
            reserved = (
                self.db.query(OrderReservation).filter(OrderReservation.item_id == item_id).count()
            )
            if reserved:
                raise ReferenceInUseError("Stocked item", item_id, f"{reserved} order reservation(s)")
            self.db.delete(item)

        run_in_transaction(self.db, operation, "delete_item")
        logger.info(f"Deleted stocked item {item_id}")
