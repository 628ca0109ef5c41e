"""Recipe Costing Service - prices recipes from the live purchase ledger.

total_cost_price = making_charge + sum(wac(item) * base_units(line))

Two paths share the arithmetic:
- Mutation path (create/update): every line is checked against on-hand
  stock first, so a recipe can't be saved if the kitchen couldn't make
  one unit of it right now.
- Pricing path (restock cascade): no stock gating, only re-pricing.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from kitchen_ledger.core.exceptions import (
    IngredientNotFoundError,
    InvalidQuantityError,
    RecipeNotFoundError,
    ReferenceInUseError,
)
from kitchen_ledger.db.transaction import run_in_transaction
from kitchen_ledger.models.order import OrderLine
from kitchen_ledger.models.recipe import Recipe, RecipeLine
from kitchen_ledger.models.stocked_item import StockedItem
from kitchen_ledger.services.stock_ledger import ensure_sufficient
from kitchen_ledger.services.units import item_quantity_to_base_units, parse_unit, quantize
from kitchen_ledger.services.valuation import average_cost_per_base_unit

logger = logging.getLogger(__name__)


@dataclass
class IngredientLineInput:
    item_id: int
    quantity_needed: Decimal
    unit: str


@dataclass
class CostedLine:
    item_id: int
    item_name: str
    quantity_needed: Decimal
    unit: str
    base_units: Decimal
    unit_cost: Decimal
    line_cost: Decimal


@dataclass
class RecipeCostBreakdown:
    making_charge: Decimal
    lines: List[CostedLine] = field(default_factory=list)

    @property
    def ingredients_cost(self) -> Decimal:
        return quantize(sum((line.line_cost for line in self.lines), Decimal("0")))

    @property
    def total_cost_price(self) -> Decimal:
        return quantize(self.making_charge + sum((line.line_cost for line in self.lines), Decimal("0")))


def _validate_inputs(making_charge: Optional[Decimal], lines: Optional[Sequence[IngredientLineInput]]) -> None:
    if making_charge is not None and Decimal(making_charge) < 0:
        raise InvalidQuantityError("making_charge", making_charge)
    for line in lines or []:
        # Stored at 4 places; a value that rounds to zero would reserve nothing
        if quantize(Decimal(line.quantity_needed)) <= 0:
            raise InvalidQuantityError("quantity_needed", line.quantity_needed)
        parse_unit(line.unit)


class RecipeCostingService:
    """Service for costing and maintaining recipes."""

    def __init__(self, db: Session):
        self.db = db

    def get_recipe(self, recipe_id: int) -> Recipe:
        recipe = self.db.get(Recipe, recipe_id)
        if not recipe:
            raise RecipeNotFoundError(recipe_id)
        return recipe

    def list_recipes(self) -> List[Recipe]:
        return self.db.query(Recipe).order_by(Recipe.id).all()

    # ===== COSTING =====

    def cost_lines(
        self,
        lines: Sequence[IngredientLineInput],
        making_charge: Decimal,
        validate_stock: bool = True,
    ) -> RecipeCostBreakdown:
        """Price a set of ingredient lines against the current ledger."""
        breakdown = RecipeCostBreakdown(making_charge=Decimal(making_charge or 0))

        for line in lines:
            item = self.db.get(StockedItem, line.item_id)
            if not item:
                raise IngredientNotFoundError(line.item_id)

            unit = parse_unit(line.unit)
            quantity = quantize(Decimal(line.quantity_needed))
            base_units = item_quantity_to_base_units(item, quantity, unit)

            if validate_stock:
                ensure_sufficient(item, base_units)

            unit_cost = average_cost_per_base_unit(item)
            breakdown.lines.append(
                CostedLine(
                    item_id=item.id,
                    item_name=item.name,
                    quantity_needed=quantity,
                    unit=unit.value,
                    base_units=base_units,
                    unit_cost=unit_cost,
                    line_cost=unit_cost * base_units,
                )
            )

        return breakdown

    def cost_recipe(self, recipe: Recipe, validate_stock: bool = True) -> RecipeCostBreakdown:
        lines = [
            IngredientLineInput(
                item_id=line.item_id, quantity_needed=line.quantity_needed, unit=line.unit
            )
            for line in recipe.lines
        ]
        return self.cost_lines(lines, recipe.making_charge, validate_stock=validate_stock)

    def recost_recipes_using(self, item_id: int) -> List[int]:
        """Re-price every recipe that uses ``item_id``. Joins the caller's transaction."""
        recipes = (
            self.db.query(Recipe)
            .join(RecipeLine, RecipeLine.recipe_id == Recipe.id)
            .filter(RecipeLine.item_id == item_id)
            .distinct()
            .order_by(Recipe.id)
            .all()
        )

        recosted = []
        for recipe in recipes:
            previous = recipe.total_cost_price
            breakdown = self.cost_recipe(recipe, validate_stock=False)
            recipe.total_cost_price = breakdown.total_cost_price
            recosted.append(recipe.id)
            logger.debug(
                f"Recosted recipe {recipe.id} '{recipe.name}': {previous} -> {recipe.total_cost_price}"
            )

        return recosted

    # ===== MUTATIONS =====

    def create_recipe(
        self,
        name: str,
        making_charge: Decimal,
        lines: Sequence[IngredientLineInput],
        description: Optional[str] = None,
    ) -> Recipe:
        _validate_inputs(making_charge, lines)

        def operation() -> Recipe:
            breakdown = self.cost_lines(lines, making_charge, validate_stock=True)
            recipe = Recipe(
                name=name,
                description=description,
                making_charge=quantize(Decimal(making_charge)),
                total_cost_price=breakdown.total_cost_price,
                lines=[
                    RecipeLine(
                        item_id=costed.item_id,
                        quantity_needed=costed.quantity_needed,
                        unit=costed.unit,
                    )
                    for costed in breakdown.lines
                ],
            )
            self.db.add(recipe)
            self.db.flush()
            return recipe

        recipe = run_in_transaction(self.db, operation, "create_recipe")
        logger.info(f"Created recipe {recipe.id} '{recipe.name}' costing {recipe.total_cost_price}")
        return recipe

    def update_recipe(
        self,
        recipe_id: int,
        name: Optional[str] = None,
        making_charge: Optional[Decimal] = None,
        lines: Optional[Sequence[IngredientLineInput]] = None,
        description: Optional[str] = None,
    ) -> Recipe:
        """Edit a recipe and recompute its cost.

        ``lines`` replaces the whole ingredient set; stock is only validated
        when the ingredient set changes.
        """
        _validate_inputs(making_charge, lines)

        def operation() -> Recipe:
            recipe = self.get_recipe(recipe_id)
            if name is not None:
                recipe.name = name
            if description is not None:
                recipe.description = description
            if making_charge is not None:
                recipe.making_charge = quantize(Decimal(making_charge))

            if lines is not None:
                breakdown = self.cost_lines(lines, recipe.making_charge, validate_stock=True)
                recipe.lines = [
                    RecipeLine(
                        item_id=costed.item_id,
                        quantity_needed=costed.quantity_needed,
                        unit=costed.unit,
                    )
                    for costed in breakdown.lines
                ]
            else:
                breakdown = self.cost_recipe(recipe, validate_stock=False)

            recipe.total_cost_price = breakdown.total_cost_price
            self.db.flush()
            return recipe

        recipe = run_in_transaction(self.db, operation, "update_recipe")
        logger.info(f"Updated recipe {recipe.id} '{recipe.name}' costing {recipe.total_cost_price}")
        return recipe

    def delete_recipe(self, recipe_id: int) -> None:
        def operation() -> None:
            recipe = self.get_recipe(recipe_id)
            in_use = (
                self.db.query(OrderLine).filter(OrderLine.recipe_id == recipe_id).count()
            )
            if in_use:
                raise ReferenceInUseError("Recipe", recipe_id, f"{in_use} order line(s)")
            self.db.delete(recipe)

        run_in_transaction(self.db, operation, "delete_recipe")
        logger.info(f"Deleted recipe {recipe_id}")
