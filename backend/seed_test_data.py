"""Seed demo data for a local Kitchen Ledger database.

Creates a few stocked items, restocks them, builds recipes, adds a customer
and places one pending and one ongoing order. Everything goes through the
engine services so the ledger, recipe costs and reservations are consistent.

Usage:
    cd backend
    python seed_test_data.py
"""

import sys
import os
from decimal import Decimal

# Ensure the backend package is importable
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from kitchen_ledger.db.session import SessionLocal, engine
from kitchen_ledger.db.base import Base
import kitchen_ledger.models  # noqa: F401
from kitchen_ledger.models.order import OrderStatus
from kitchen_ledger.models.stocked_item import ItemClass, StockedItem
from kitchen_ledger.services.customer_service import CustomerService
from kitchen_ledger.services.inventory_service import InventoryService
from kitchen_ledger.services.order_stock_service import OrderLineInput, OrderStockService
from kitchen_ledger.services.recipe_costing_service import IngredientLineInput, RecipeCostingService
from kitchen_ledger.services.restock_service import RestockService


def seed():
    """Insert demo data unless the database already has items."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(StockedItem).first() is not None:
            print("Database already has stocked items, skipping seed.")
            return
        _seed_all(db)
        print("Seed data committed successfully.")
    finally:
        db.close()


def _seed_all(db):
    inventory = InventoryService(db)
    restock = RestockService(db)

    flour = inventory.create_item(
        name="Flour", unit="KGS", pack_weight=Decimal("1"),
        low_stock_threshold=Decimal("2"), low_stock_threshold_unit="KGS",
    )
    butter = inventory.create_item(name="Butter", unit="GRAMS", pack_weight=Decimal("500"))
    milk = inventory.create_item(name="Milk", unit="LITERS", pack_weight=Decimal("1"))
    eggs = inventory.create_item(name="Eggs", unit="PIECES", pack_weight=Decimal("12"))
    box = inventory.create_item(
        name="Cake Box", unit="BOXES", item_class=ItemClass.PACKAGING,
        low_stock_threshold=Decimal("10"),
    )

    restock.restock(flour.id, added_packs=10, added_cost=Decimal("500"))
    restock.restock(butter.id, added_packs=4, added_cost=Decimal("900"))
    restock.restock(milk.id, added_packs=6, added_cost=Decimal("360"))
    restock.restock(eggs.id, added_packs=5, added_cost=Decimal("420"))
    restock.restock(box.id, added_packs=25, added_cost=Decimal("250"))
    print("Created and restocked 5 stocked items.")

    recipes = RecipeCostingService(db)
    bread = recipes.create_recipe(
        name="Bread",
        making_charge=Decimal("10"),
        lines=[IngredientLineInput(item_id=flour.id, quantity_needed=Decimal("200"), unit="GRAMS")],
    )
    cake = recipes.create_recipe(
        name="Vanilla Cake",
        making_charge=Decimal("40"),
        description="1 kg sponge",
        lines=[
            IngredientLineInput(item_id=flour.id, quantity_needed=Decimal("0.3"), unit="KGS"),
            IngredientLineInput(item_id=butter.id, quantity_needed=Decimal("150"), unit="GRAMS"),
            IngredientLineInput(item_id=milk.id, quantity_needed=Decimal("200"), unit="MILLILITERS"),
            IngredientLineInput(item_id=eggs.id, quantity_needed=Decimal("4"), unit="PIECES"),
            IngredientLineInput(item_id=box.id, quantity_needed=Decimal("1"), unit="PIECES"),
        ],
    )
    print(f"Created recipes: Bread ({bread.total_cost_price}), Vanilla Cake ({cake.total_cost_price}).")

    asha = CustomerService(db).create_customer(
        name="Asha", phone="+910000000001", address="12 Baker Street"
    )

    orders = OrderStockService(db)
    orders.create_order(
        customer_name="Walk-in",
        lines=[OrderLineInput(recipe_id=bread.id, quantity=5, selling_price=Decimal("45"))],
    )
    orders.create_order(
        customer_id=asha.id,
        status=OrderStatus.ONGOING,
        lines=[OrderLineInput(recipe_id=cake.id, quantity=2, selling_price=Decimal("650"))],
    )
    print("Created 1 pending and 1 ongoing order.")


if __name__ == "__main__":
    seed()
