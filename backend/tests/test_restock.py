"""Tests for restocking and the recipe cost cascade."""

import logging

import pytest
from decimal import Decimal

from kitchen_ledger.core.exceptions import (
    IncompatibleUnitError,
    InvalidQuantityError,
    ItemNotFoundError,
)
from kitchen_ledger.models.stock import MovementReason, StockMovement
from kitchen_ledger.models.stocked_item import ItemClass
from kitchen_ledger.services.inventory_service import InventoryService
from kitchen_ledger.services.recipe_costing_service import RecipeCostingService
from kitchen_ledger.services.restock_service import RestockService
from kitchen_ledger.services.stock_ledger import movement_balance
from kitchen_ledger.services.valuation import average_cost_per_base_unit


class TestRestock:
    def test_flour_ledger(self, db_session, flour):
        db_session.refresh(flour)
        assert flour.cumulative_packs_purchased == 10
        assert flour.cumulative_cost_spent == Decimal("500")
        assert flour.on_hand_base_units == Decimal("10000")
        assert average_cost_per_base_unit(flour) == Decimal("0.05")

    def test_records_purchase_movement(self, db_session, flour):
        movement = db_session.query(StockMovement).filter(StockMovement.item_id == flour.id).one()
        assert movement.reason == MovementReason.PURCHASE.value
        assert movement.qty_delta == Decimal("10000")
        assert movement.cost_delta == Decimal("500")
        assert movement_balance(db_session, flour.id) == Decimal("10000")

    def test_weighted_average_after_second_purchase(self, db_session, flour):
        RestockService(db_session).restock(flour.id, added_packs=10, added_cost=Decimal("700"))
        # 1200 over 20000 g
        assert average_cost_per_base_unit(flour) == Decimal("0.06")

    def test_different_pack_size_counts_in_item_packs(self, db_session, flour):
        result = RestockService(db_session).restock(
            flour.id,
            added_packs=2,
            added_cost=Decimal("250"),
            added_pack_weight=Decimal("2500"),
            added_unit="GRAMS",
        )
        assert result.packs_added == 5
        assert result.base_units_added == Decimal("5000")
        assert result.item.on_hand_base_units == Decimal("15000")
        assert result.item.cumulative_packs_purchased == 15

    def test_rounding_drift_logs_warning(self, db_session, flour, caplog):
        with caplog.at_level(logging.WARNING, logger="kitchen_ledger.services.restock_service"):
            result = RestockService(db_session).restock(
                flour.id,
                added_packs=1,
                added_cost=Decimal("70"),
                added_pack_weight=Decimal("1400"),
                added_unit="GRAMS",
            )
        assert result.packs_added == 1
        assert result.base_units_added == Decimal("1400")
        assert result.item.on_hand_base_units == Decimal("11400")
        assert "drift" in caplog.text

    def test_rejects_restock_below_half_a_pack(self, db_session, flour):
        with pytest.raises(InvalidQuantityError) as exc_info:
            RestockService(db_session).restock(
                flour.id,
                added_packs=1,
                added_cost=Decimal("20"),
                added_pack_weight=Decimal("400"),
                added_unit="GRAMS",
            )
        assert "half a pack" in str(exc_info.value)
        db_session.refresh(flour)
        assert flour.cumulative_packs_purchased == 10
        assert flour.cumulative_cost_spent == Decimal("500")
        assert flour.on_hand_base_units == Decimal("10000")
        assert average_cost_per_base_unit(flour) == Decimal("0.05")

    def test_small_restock_into_fresh_item_keeps_positive_cost(self, db_session):
        item = InventoryService(db_session).create_item(name="Yeast", unit="KGS", pack_weight=Decimal("1"))
        with pytest.raises(InvalidQuantityError):
            RestockService(db_session).restock(
                item.id, added_packs=1, added_cost=Decimal("20"),
                added_pack_weight=Decimal("400"), added_unit="GRAMS",
            )
        result = RestockService(db_session).restock(
            item.id, added_packs=3, added_cost=Decimal("60"),
            added_pack_weight=Decimal("400"), added_unit="GRAMS",
        )
        assert result.packs_added == 1
        assert average_cost_per_base_unit(result.item) > 0

    def test_packaging_ignores_pack_weight(self, db_session, cake_box):
        result = RestockService(db_session).restock(cake_box.id, added_packs=5, added_cost=Decimal("10"))
        assert result.packs_added == 5
        assert result.item.on_hand_base_units == Decimal("25")
        assert average_cost_per_base_unit(result.item) == Decimal("2")

    @pytest.mark.parametrize("packs", [0, -3])
    def test_rejects_non_positive_packs(self, db_session, flour, packs):
        with pytest.raises(InvalidQuantityError):
            RestockService(db_session).restock(flour.id, added_packs=packs, added_cost=Decimal("1"))

    def test_rejects_negative_cost(self, db_session, flour):
        with pytest.raises(InvalidQuantityError):
            RestockService(db_session).restock(flour.id, added_packs=1, added_cost=Decimal("-1"))

    def test_rejects_zero_pack_weight(self, db_session, flour):
        with pytest.raises(InvalidQuantityError):
            RestockService(db_session).restock(
                flour.id, added_packs=1, added_cost=Decimal("1"), added_pack_weight=Decimal("0")
            )

    def test_rejects_incompatible_unit(self, db_session, flour):
        with pytest.raises(IncompatibleUnitError):
            RestockService(db_session).restock(
                flour.id, added_packs=1, added_cost=Decimal("1"),
                added_pack_weight=Decimal("1"), added_unit="BOXES",
            )
        db_session.refresh(flour)
        assert flour.cumulative_packs_purchased == 10

    def test_unknown_item(self, db_session):
        with pytest.raises(ItemNotFoundError):
            RestockService(db_session).restock(123, added_packs=1, added_cost=Decimal("1"))


class TestCascade:
    def test_recosts_dependent_recipes(self, db_session, flour, bread, cake):
        result = RestockService(db_session).restock(flour.id, added_packs=10, added_cost=Decimal("1500"))
        # WAC is now 2000 / 20000 g = 0.1
        assert sorted(result.recosted_recipe_ids) == sorted([bread.id, cake.id])

        svc = RecipeCostingService(db_session)
        assert svc.get_recipe(bread.id).total_cost_price == Decimal("30")
        # 500 g * 0.1 + 12.5 + 2 + 5
        assert svc.get_recipe(cake.id).total_cost_price == Decimal("69.5")

    def test_unrelated_recipes_untouched(self, db_session, flour, sugar, bread):
        result = RestockService(db_session).restock(sugar.id, added_packs=1, added_cost=Decimal("500"))
        assert result.recosted_recipe_ids == []
        assert RecipeCostingService(db_session).get_recipe(bread.id).total_cost_price == Decimal("20")

    def test_cost_matches_fresh_computation(self, db_session, flour, sugar, cake):
        RestockService(db_session).restock(sugar.id, added_packs=3, added_cost=Decimal("33.33"))
        svc = RecipeCostingService(db_session)
        recipe = svc.get_recipe(cake.id)
        assert recipe.total_cost_price == svc.cost_recipe(recipe, validate_stock=False).total_cost_price

    def test_cascade_skips_stock_validation(self, db_session, flour, bread):
        # Consume almost all flour through an order, then restock a little
        from kitchen_ledger.services.order_stock_service import OrderLineInput, OrderStockService

        OrderStockService(db_session).create_order(
            lines=[OrderLineInput(recipe_id=bread.id, quantity=50)], status="ONGOING"
        )
        result = RestockService(db_session).restock(flour.id, added_packs=1, added_cost=Decimal("50"))
        assert result.recosted_recipe_ids == [bread.id]
