"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; keep tests off the on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("TRANSACTION_RETRY_BACKOFF_MS", "0")
os.environ.setdefault("DEBUG", "false")

from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kitchen_ledger.db.base import Base
from kitchen_ledger.db.session import get_db
from kitchen_ledger.main import app
# Import all models to ensure they're registered with Base.metadata
from kitchen_ledger.models import *
from kitchen_ledger.models.stocked_item import ItemClass
from kitchen_ledger.services.inventory_service import InventoryService
from kitchen_ledger.services.recipe_costing_service import IngredientLineInput, RecipeCostingService
from kitchen_ledger.services.restock_service import RestockService

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def flour(db_session: Session):
    """Flour bought in 1 kg packs: 10 packs for 500, so 10000 g at 0.05/g."""
    item = InventoryService(db_session).create_item(
        name="Flour", unit="KGS", pack_weight=Decimal("1")
    )
    RestockService(db_session).restock(item.id, added_packs=10, added_cost=Decimal("500"))
    return item


@pytest.fixture
def sugar(db_session: Session):
    """Sugar bought in 500 g packs: 4 packs for 100, so 2000 g at 0.05/g."""
    item = InventoryService(db_session).create_item(
        name="Sugar", unit="GRAMS", pack_weight=Decimal("500")
    )
    RestockService(db_session).restock(item.id, added_packs=4, added_cost=Decimal("100"))
    return item


@pytest.fixture
def cake_box(db_session: Session):
    """Packaging: 20 boxes for 40, so 2 per box."""
    item = InventoryService(db_session).create_item(
        name="Cake Box", unit="BOXES", item_class=ItemClass.PACKAGING
    )
    RestockService(db_session).restock(item.id, added_packs=20, added_cost=Decimal("40"))
    return item


@pytest.fixture
def bread(db_session: Session, flour):
    """200 g flour plus a making charge of 10: costs 20."""
    return RecipeCostingService(db_session).create_recipe(
        name="Bread",
        making_charge=Decimal("10"),
        lines=[IngredientLineInput(item_id=flour.id, quantity_needed=Decimal("200"), unit="GRAMS")],
    )


@pytest.fixture
def cake(db_session: Session, flour, sugar, cake_box):
    """0.5 kg flour, 250 g sugar and one box, making charge 5: costs 25 + 12.5 + 2 + 5 = 44.5."""
    return RecipeCostingService(db_session).create_recipe(
        name="Cake",
        making_charge=Decimal("5"),
        lines=[
            IngredientLineInput(item_id=flour.id, quantity_needed=Decimal("0.5"), unit="KGS"),
            IngredientLineInput(item_id=sugar.id, quantity_needed=Decimal("250"), unit="GRAMS"),
            IngredientLineInput(item_id=cake_box.id, quantity_needed=Decimal("1"), unit="PIECES"),
        ],
    )
