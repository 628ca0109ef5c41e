"""Tests for weighted-average cost."""

from decimal import Decimal

from kitchen_ledger.models.stocked_item import ItemClass, StockedItem
from kitchen_ledger.services.valuation import (
    average_cost_per_base_unit,
    on_hand_value,
    total_historical_base_units,
)


def _item(**kwargs) -> StockedItem:
    defaults = dict(
        name="Item",
        item_class=ItemClass.CONSUMABLE,
        unit="KGS",
        pack_weight=Decimal("1"),
        cumulative_packs_purchased=0,
        cumulative_cost_spent=Decimal("0"),
        on_hand_base_units=Decimal("0"),
    )
    defaults.update(kwargs)
    return StockedItem(**defaults)


class TestAverageCost:
    def test_zero_when_nothing_purchased(self):
        assert average_cost_per_base_unit(_item()) == Decimal("0")

    def test_zero_denominator_even_with_cost(self):
        item = _item(cumulative_cost_spent=Decimal("10"))
        assert average_cost_per_base_unit(item) == Decimal("0")

    def test_consumable_uses_pack_weight_in_base_units(self):
        item = _item(cumulative_packs_purchased=10, cumulative_cost_spent=Decimal("500"))
        assert total_historical_base_units(item) == Decimal("10000")
        assert average_cost_per_base_unit(item) == Decimal("0.05")

    def test_pounds_pack(self):
        item = _item(
            unit="POUNDS",
            pack_weight=Decimal("2"),
            cumulative_packs_purchased=5,
            cumulative_cost_spent=Decimal("453.592"),
        )
        # 5 packs * 2 lb * 453.592 g
        assert total_historical_base_units(item) == Decimal("4535.920")
        assert average_cost_per_base_unit(item) == Decimal("0.1")

    def test_packaging_counts_packs_only(self):
        item = _item(
            item_class=ItemClass.PACKAGING,
            unit="BOXES",
            pack_weight=Decimal("1"),
            cumulative_packs_purchased=20,
            cumulative_cost_spent=Decimal("40"),
        )
        assert total_historical_base_units(item) == Decimal("20")
        assert average_cost_per_base_unit(item) == Decimal("2")

    def test_positive_after_costed_purchase(self):
        item = _item(cumulative_packs_purchased=1, cumulative_cost_spent=Decimal("0.01"))
        assert average_cost_per_base_unit(item) > 0


def test_on_hand_value():
    item = _item(
        cumulative_packs_purchased=10,
        cumulative_cost_spent=Decimal("500"),
        on_hand_base_units=Decimal("4000"),
    )
    assert on_hand_value(item) == Decimal("200")
