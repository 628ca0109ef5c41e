"""Typed failures raised by the stock engine.

Every error here is recoverable: the operation that raised it has been
rolled back in full, and callers translate it into a user-facing response.
InsufficientStockError is the one message meant to be shown verbatim.
"""

from decimal import Decimal
from typing import Optional


class StockEngineError(Exception):
    """Base class for all engine failures."""

    code = "stock_engine_error"


class InvalidUnitError(StockEngineError):
    """Raised for a unit string outside the supported set."""

    code = "invalid_unit"

    def __init__(self, unit: object, message: Optional[str] = None):
        self.unit = unit
        super().__init__(message or f"Unsupported unit '{unit}'")


class IncompatibleUnitError(InvalidUnitError):
    """Raised when a count unit is mixed with a mass or volume unit."""

    code = "incompatible_unit"

    def __init__(self, from_unit: str, to_unit: str, item_name: str = ""):
        self.from_unit = from_unit
        self.to_unit = to_unit
        self.item_name = item_name
        super().__init__(
            from_unit,
            f"Cannot convert '{from_unit}' to '{to_unit}' for item '{item_name}'",
        )


class InvalidQuantityError(StockEngineError):
    """Raised for a zero or negative value where a positive one is required."""

    code = "invalid_quantity"

    def __init__(self, field: str, value: object, message: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(message or f"Invalid {field}: {value}")


class RecordNotFoundError(StockEngineError):
    code = "not_found"
    kind = "Record"

    def __init__(self, record_id: object):
        self.record_id = record_id
        super().__init__(f"{self.kind} {record_id} not found")


class ItemNotFoundError(RecordNotFoundError):
    code = "item_not_found"
    kind = "Stocked item"


class IngredientNotFoundError(ItemNotFoundError):
    """A recipe line points at a stocked item that does not exist."""

    code = "ingredient_not_found"
    kind = "Ingredient item"


class RecipeNotFoundError(RecordNotFoundError):
    code = "recipe_not_found"
    kind = "Recipe"


class OrderNotFoundError(RecordNotFoundError):
    code = "order_not_found"
    kind = "Order"


class CustomerNotFoundError(RecordNotFoundError):
    code = "customer_not_found"
    kind = "Customer"


class InsufficientStockError(StockEngineError):
    """Raised when there's not enough stock on hand for a requirement."""

    code = "insufficient_stock"

    def __init__(
        self,
        item_name: str,
        needed: Decimal,
        available: Decimal,
        unit: str = "",
        item_id: Optional[int] = None,
    ):
        self.item_name = item_name
        self.item_id = item_id
        self.needed = needed
        self.available = available
        self.unit = unit
        suffix = f" {unit}" if unit else ""
        super().__init__(
            f"Insufficient stock for '{item_name}': need {needed}{suffix}, have {available}{suffix}"
        )


class ConcurrencyConflictError(StockEngineError):
    """A transaction kept losing to concurrent writers. Safe to retry later."""

    code = "concurrency_conflict"

    def __init__(self, operation: str, attempts: int):
        self.operation = operation
        self.attempts = attempts
        super().__init__(
            f"{operation} aborted after {attempts} attempt(s) due to concurrent modification"
        )


class InvalidOrderTransitionError(StockEngineError):
    code = "invalid_order_transition"

    def __init__(self, from_status: object, to_status: object):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Order cannot move from {from_status} to {to_status}")


class ReferenceInUseError(StockEngineError):
    """Deleting a record that other records still point at."""

    code = "reference_in_use"

    def __init__(self, kind: str, record_id: object, used_by: str):
        self.kind = kind
        self.record_id = record_id
        self.used_by = used_by
        super().__init__(f"{kind} {record_id} is still used by {used_by}")


class LedgerNotEmptyError(StockEngineError):
    """Pack definition edits are only allowed before the first restock."""

    code = "ledger_not_empty"

    def __init__(self, item_name: str):
        self.item_name = item_name
        super().__init__(
            f"Cannot change unit or pack weight of '{item_name}' after it has been restocked"
        )
