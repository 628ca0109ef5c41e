"""Dashboard schemas."""

from decimal import Decimal

from pydantic import BaseModel


class DashboardStatsResponse(BaseModel):
    total_items: int
    low_stock_count: int
    pending_orders: int
    active_orders: int
    inventory_value: Decimal

    model_config = {"from_attributes": True}
