"""Stocked item routes: catalogue, restock and movement history."""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from kitchen_ledger.db.session import DbSession
from kitchen_ledger.models.stock import StockMovement
from kitchen_ledger.models.stocked_item import ItemClass, StockedItem
from kitchen_ledger.schemas.stock import RestockRequest, RestockResponse, StockMovementResponse
from kitchen_ledger.schemas.stocked_item import (
    StockedItemCreate,
    StockedItemResponse,
    StockedItemUpdate,
)
from kitchen_ledger.services.inventory_service import InventoryService
from kitchen_ledger.services.restock_service import RestockService
from kitchen_ledger.services.units import base_unit_label
from kitchen_ledger.services.valuation import average_cost_per_base_unit

router = APIRouter()


def item_response(item: StockedItem) -> StockedItemResponse:
    return StockedItemResponse.model_validate(item).model_copy(
        update={
            "base_unit": base_unit_label(item.unit),
            "average_cost_per_base_unit": average_cost_per_base_unit(item),
        }
    )


@router.get("/", response_model=List[StockedItemResponse])
def list_items(db: DbSession, item_class: Optional[ItemClass] = Query(None)):
    """List stocked items."""
    return [item_response(item) for item in InventoryService(db).list_items(item_class)]


@router.post("/", response_model=StockedItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(data: StockedItemCreate, db: DbSession):
    """Create a stocked item with an empty ledger."""
    item = InventoryService(db).create_item(
        name=data.name,
        unit=data.unit,
        item_class=data.item_class,
        pack_weight=data.pack_weight,
        low_stock_threshold=data.low_stock_threshold,
        low_stock_threshold_unit=data.low_stock_threshold_unit,
    )
    return item_response(item)


@router.get("/{item_id}", response_model=StockedItemResponse)
def get_item(item_id: int, db: DbSession):
    return item_response(InventoryService(db).get_item(item_id))


@router.put("/{item_id}", response_model=StockedItemResponse)
def update_item(item_id: int, data: StockedItemUpdate, db: DbSession):
    """Update a stocked item. Unit and pack weight are frozen after the first restock."""
    changes = data.model_dump(exclude_unset=True)
    item = InventoryService(db).update_item(item_id, **changes)
    return item_response(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: int, db: DbSession):
    InventoryService(db).delete_item(item_id)


@router.post("/{item_id}/restock", response_model=RestockResponse)
def restock_item(item_id: int, data: RestockRequest, db: DbSession):
    """Record a purchase and re-price every recipe using the item."""
    result = RestockService(db).restock(
        item_id,
        added_packs=data.added_packs,
        added_cost=data.added_cost,
        added_pack_weight=data.added_pack_weight,
        added_unit=data.added_unit,
    )
    return RestockResponse(
        item=item_response(result.item),
        packs_added=result.packs_added,
        base_units_added=result.base_units_added,
        cost_added=result.cost_added,
        recosted_recipe_ids=result.recosted_recipe_ids,
    )


@router.get("/{item_id}/movements", response_model=List[StockMovementResponse])
def list_movements(item_id: int, db: DbSession, limit: int = Query(100, ge=1, le=1000)):
    """Stock movement history for an item, newest first."""
    InventoryService(db).get_item(item_id)
    return (
        db.query(StockMovement)
        .filter(StockMovement.item_id == item_id)
        .order_by(StockMovement.id.desc())
        .limit(limit)
        .all()
    )
