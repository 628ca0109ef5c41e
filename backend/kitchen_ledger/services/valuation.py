"""Weighted-average cost (WAC) of stocked items.

WAC is always derived from the cumulative purchase ledger, never cached:

    total_historical = packs                           (PACKAGING)
                     = packs * base_units(pack_weight) (everything else)
    wac              = cost_spent / total_historical   (0 if nothing bought)
"""

from decimal import Decimal

from kitchen_ledger.models.stocked_item import ItemClass, StockedItem
from kitchen_ledger.services.units import to_base_units

ZERO = Decimal("0")


def pack_base_units(item: StockedItem) -> Decimal:
    """Base units in one pack of ``item``."""
    if item.item_class == ItemClass.PACKAGING:
        return Decimal("1")
    return to_base_units(item.pack_weight, item.unit)


def total_historical_base_units(item: StockedItem) -> Decimal:
    packs = Decimal(item.cumulative_packs_purchased or 0)
    if item.item_class == ItemClass.PACKAGING:
        return packs
    return packs * pack_base_units(item)


def average_cost_per_base_unit(item: StockedItem) -> Decimal:
    total = total_historical_base_units(item)
    if total == 0:
        return ZERO
    return Decimal(item.cumulative_cost_spent or 0) / total


def on_hand_value(item: StockedItem) -> Decimal:
    """Current stock valued at WAC."""
    return Decimal(item.on_hand_base_units or 0) * average_cost_per_base_unit(item)
