"""Recipe (BOM) routes."""

from typing import List

from fastapi import APIRouter, status

from kitchen_ledger.db.session import DbSession
from kitchen_ledger.schemas.recipe import (
    RecipeAvailabilityResponse,
    RecipeCreate,
    RecipeResponse,
    RecipeUpdate,
)
from kitchen_ledger.services.recipe_costing_service import IngredientLineInput, RecipeCostingService
from kitchen_ledger.services.reporting_service import ReportingService

router = APIRouter()


def _line_inputs(lines) -> List[IngredientLineInput]:
    return [
        IngredientLineInput(item_id=line.item_id, quantity_needed=line.quantity_needed, unit=line.unit)
        for line in lines
    ]


@router.get("/", response_model=List[RecipeResponse])
def list_recipes(db: DbSession):
    """List all recipes."""
    return RecipeCostingService(db).list_recipes()


@router.post("/", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
def create_recipe(data: RecipeCreate, db: DbSession):
    """Create a recipe. Fails if current stock can't cover one unit of it."""
    return RecipeCostingService(db).create_recipe(
        name=data.name,
        making_charge=data.making_charge,
        lines=_line_inputs(data.lines),
        description=data.description,
    )


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(recipe_id: int, db: DbSession):
    return RecipeCostingService(db).get_recipe(recipe_id)


@router.put("/{recipe_id}", response_model=RecipeResponse)
def update_recipe(recipe_id: int, data: RecipeUpdate, db: DbSession):
    """Update a recipe and recompute its cost."""
    return RecipeCostingService(db).update_recipe(
        recipe_id,
        name=data.name,
        making_charge=data.making_charge,
        lines=_line_inputs(data.lines) if data.lines is not None else None,
        description=data.description,
    )


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(recipe_id: int, db: DbSession):
    RecipeCostingService(db).delete_recipe(recipe_id)


@router.get("/{recipe_id}/availability", response_model=RecipeAvailabilityResponse)
def get_recipe_availability(recipe_id: int, db: DbSession):
    """Per-ingredient stock against one unit of the recipe."""
    return RecipeAvailabilityResponse.model_validate(ReportingService(db).recipe_availability(recipe_id))
