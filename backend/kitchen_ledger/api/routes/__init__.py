"""API routes."""

from fastapi import APIRouter

from kitchen_ledger.api.routes import customers, dashboard, inventory, orders, recipes

api_router = APIRouter()

api_router.include_router(inventory.router, prefix="/items", tags=["inventory"])
api_router.include_router(recipes.router, prefix="/recipes", tags=["recipes"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
