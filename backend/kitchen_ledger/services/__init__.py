# Services module

from kitchen_ledger.services.customer_service import CustomerService
from kitchen_ledger.services.inventory_service import InventoryService
from kitchen_ledger.services.order_stock_service import OrderLineInput, OrderStockService
from kitchen_ledger.services.recipe_costing_service import (
    IngredientLineInput,
    RecipeCostBreakdown,
    RecipeCostingService,
)
from kitchen_ledger.services.reporting_service import ReportingService
from kitchen_ledger.services.restock_service import RestockResult, RestockService
