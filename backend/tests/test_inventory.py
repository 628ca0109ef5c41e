"""Tests for the stocked item catalogue."""

import pytest
from decimal import Decimal

from kitchen_ledger.core.exceptions import (
    IncompatibleUnitError,
    InvalidQuantityError,
    InvalidUnitError,
    ItemNotFoundError,
    LedgerNotEmptyError,
    ReferenceInUseError,
)
from kitchen_ledger.models.stocked_item import ItemClass, StockedItem
from kitchen_ledger.services.inventory_service import InventoryService
from kitchen_ledger.services.order_stock_service import OrderLineInput, OrderStockService
from kitchen_ledger.services.recipe_costing_service import RecipeCostingService
from kitchen_ledger.services.stock_ledger import ledger_violations


class TestCreateItem:
    def test_starts_with_empty_ledger(self, db_session):
        item = InventoryService(db_session).create_item(name="Butter", unit="kg", pack_weight=Decimal("0.5"))
        assert item.unit == "KGS"
        assert item.pack_weight == Decimal("0.5")
        assert item.cumulative_packs_purchased == 0
        assert item.cumulative_cost_spent == Decimal("0")
        assert item.on_hand_base_units == Decimal("0")
        assert item.version == 1
        assert ledger_violations(item) == []

    def test_packaging_forces_unit_pack(self, db_session):
        item = InventoryService(db_session).create_item(
            name="Ribbon", unit="PIECES", item_class=ItemClass.PACKAGING, pack_weight=Decimal("50")
        )
        assert item.pack_weight == Decimal("1")

    def test_packaging_requires_count_unit(self, db_session):
        with pytest.raises(IncompatibleUnitError):
            InventoryService(db_session).create_item(
                name="Bags", unit="GRAMS", item_class=ItemClass.PACKAGING
            )

    def test_consumable_requires_pack_weight(self, db_session):
        with pytest.raises(InvalidQuantityError):
            InventoryService(db_session).create_item(name="Oil", unit="LITERS")

    def test_unknown_unit(self, db_session):
        with pytest.raises(InvalidUnitError):
            InventoryService(db_session).create_item(name="Oil", unit="GALLONS", pack_weight=Decimal("1"))

    def test_threshold_unit_must_match_family(self, db_session):
        with pytest.raises(IncompatibleUnitError):
            InventoryService(db_session).create_item(
                name="Oil", unit="LITERS", pack_weight=Decimal("1"),
                low_stock_threshold=Decimal("2"), low_stock_threshold_unit="PIECES",
            )

    def test_threshold_defaults_to_item_unit(self, db_session):
        item = InventoryService(db_session).create_item(
            name="Oil", unit="LITERS", pack_weight=Decimal("1"), low_stock_threshold=Decimal("2")
        )
        assert item.low_stock_threshold_unit == "LITERS"


class TestUpdateItem:
    def test_pack_definition_editable_before_restock(self, db_session):
        svc = InventoryService(db_session)
        item = svc.create_item(name="Rice", unit="KGS", pack_weight=Decimal("1"))
        item = svc.update_item(item.id, unit="POUNDS", pack_weight=Decimal("5"))
        assert item.unit == "POUNDS"
        assert item.pack_weight == Decimal("5")

    def test_pack_definition_frozen_after_restock(self, db_session, flour):
        with pytest.raises(LedgerNotEmptyError):
            InventoryService(db_session).update_item(flour.id, pack_weight=Decimal("2"))
        assert db_session.get(StockedItem, flour.id).pack_weight == Decimal("1")

    def test_same_pack_definition_is_not_a_change(self, db_session, flour):
        item = InventoryService(db_session).update_item(flour.id, unit="kg", pack_weight=Decimal("1"), name="Wheat Flour")
        assert item.name == "Wheat Flour"

    def test_threshold_can_be_cleared(self, db_session):
        svc = InventoryService(db_session)
        item = svc.create_item(
            name="Rice", unit="KGS", pack_weight=Decimal("1"), low_stock_threshold=Decimal("3")
        )
        item = svc.update_item(item.id, low_stock_threshold=None)
        assert item.low_stock_threshold is None
        assert item.low_stock_threshold_unit is None

    def test_unknown_item(self, db_session):
        with pytest.raises(ItemNotFoundError):
            InventoryService(db_session).update_item(1, name="x")


class TestDeleteItem:
    def test_delete_unused_item(self, db_session, flour):
        InventoryService(db_session).delete_item(flour.id)
        assert db_session.query(StockedItem).count() == 0

    def test_refused_while_recipe_uses_it(self, db_session, flour, bread):
        with pytest.raises(ReferenceInUseError):
            InventoryService(db_session).delete_item(flour.id)

    def test_refused_while_order_holds_reservation(self, db_session, flour, sugar, bread):
        from kitchen_ledger.services.recipe_costing_service import IngredientLineInput

        OrderStockService(db_session).create_order(
            lines=[OrderLineInput(recipe_id=bread.id, quantity=1)], status="ONGOING"
        )
        RecipeCostingService(db_session).update_recipe(
            bread.id,
            lines=[IngredientLineInput(item_id=sugar.id, quantity_needed=Decimal("10"), unit="GRAMS")],
        )
        with pytest.raises(ReferenceInUseError):
            InventoryService(db_session).delete_item(flour.id)
