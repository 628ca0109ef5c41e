"""Restock Service - records purchases into the item ledger.

A restock grows the cumulative purchase ledger, adds the purchased quantity
to on-hand stock and re-prices every recipe that uses the item. All of it
commits together, so recipe costs never lag the ledger they were computed
from.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session

from kitchen_ledger.core.exceptions import InvalidQuantityError, ItemNotFoundError
from kitchen_ledger.db.transaction import lock_rows, run_in_transaction
from kitchen_ledger.models.stock import MovementReason
from kitchen_ledger.models.stocked_item import ItemClass, StockedItem
from kitchen_ledger.services.recipe_costing_service import RecipeCostingService
from kitchen_ledger.services.stock_ledger import apply_movement
from kitchen_ledger.services.units import (
    base_unit_label,
    ensure_compatible,
    parse_unit,
    quantize,
    to_base_units,
)
from kitchen_ledger.services.valuation import pack_base_units

logger = logging.getLogger(__name__)


@dataclass
class RestockResult:
    item: StockedItem
    packs_added: int
    base_units_added: Decimal
    cost_added: Decimal
    recosted_recipe_ids: List[int] = field(default_factory=list)


class RestockService:
    """Service for recording stock purchases."""

    def __init__(self, db: Session):
        self.db = db

    def restock(
        self,
        item_id: int,
        added_packs: int,
        added_cost: Decimal,
        added_pack_weight: Optional[Decimal] = None,
        added_unit: Optional[str] = None,
    ) -> RestockResult:
        """
        Record a purchase of ``added_packs`` packs for ``added_cost`` in total.

        For consumables the purchased packs may be denominated differently from
        the item's own pack (``added_pack_weight`` of ``added_unit``, defaulting
        to the item's pack); the ledger counts them in item packs.

        Raises:
            InvalidQuantityError: non-positive packs or pack weight, negative cost
            ItemNotFoundError: unknown item
            InvalidUnitError: unknown or incompatible unit
        """
        if added_packs is None or int(added_packs) != added_packs or added_packs <= 0:
            raise InvalidQuantityError("added_packs", added_packs)
        added_cost = Decimal(added_cost)
        if added_cost < 0:
            raise InvalidQuantityError("added_cost", added_cost)
        if added_pack_weight is not None and Decimal(added_pack_weight) <= 0:
            raise InvalidQuantityError("added_pack_weight", added_pack_weight)
        if added_unit is not None:
            parse_unit(added_unit)

        def operation() -> RestockResult:
            locked = lock_rows(self.db, StockedItem, [item_id])
            if not locked:
                raise ItemNotFoundError(item_id)
            item = locked[0]

            packs_to_add, added_base = self._resolve_quantities(
                item, int(added_packs), added_pack_weight, added_unit
            )

            item.cumulative_packs_purchased = (item.cumulative_packs_purchased or 0) + packs_to_add
            item.cumulative_cost_spent = quantize(Decimal(item.cumulative_cost_spent or 0) + added_cost)
            apply_movement(
                self.db,
                item,
                added_base,
                MovementReason.PURCHASE,
                cost_delta=added_cost,
                ref_type="restock",
                notes=f"{added_packs} pack(s)",
            )

            recosted = RecipeCostingService(self.db).recost_recipes_using(item.id)
            self.db.flush()
            return RestockResult(
                item=item,
                packs_added=packs_to_add,
                base_units_added=quantize(added_base),
                cost_added=quantize(added_cost),
                recosted_recipe_ids=recosted,
            )

        result = run_in_transaction(self.db, operation, "restock")
        logger.info(
            f"Restocked item {item_id}: +{result.packs_added} pack(s), "
            f"+{result.base_units_added} base units for {result.cost_added}; "
            f"recosted {len(result.recosted_recipe_ids)} recipe(s)"
        )
        return result

    def _resolve_quantities(
        self,
        item: StockedItem,
        added_packs: int,
        added_pack_weight: Optional[Decimal],
        added_unit: Optional[str],
    ):
        """Return (packs counted in item packs, base units added)."""
        if item.item_class == ItemClass.PACKAGING:
            return added_packs, Decimal(added_packs)

        unit = parse_unit(added_unit or item.unit)
        ensure_compatible(unit, item.unit, item.name)
        weight = Decimal(added_pack_weight) if added_pack_weight is not None else Decimal(item.pack_weight)
        added_base = Decimal(added_packs) * to_base_units(weight, unit)

        exact_packs = added_base / pack_base_units(item)
        packs_to_add = int(exact_packs.to_integral_value(rounding=ROUND_HALF_UP))
        if packs_to_add == 0:
            raise InvalidQuantityError(
                "added_packs",
                added_packs,
                f"Restock of {quantize(added_base)} {base_unit_label(item.unit)} is less than "
                f"half a pack of '{item.name}'; record it in whole item packs",
            )
        if exact_packs != packs_to_add:
            logger.warning(
                f"Restock of '{item.name}' is {exact_packs} item pack(s); "
                f"ledger counts {packs_to_add}, average cost will drift"
            )
        return packs_to_add, added_base
