"""Dashboard routes."""

from typing import List

from fastapi import APIRouter

from kitchen_ledger.db.session import DbSession
from kitchen_ledger.schemas.dashboard import DashboardStatsResponse
from kitchen_ledger.schemas.stock import LowStockItemResponse
from kitchen_ledger.services.reporting_service import ReportingService

router = APIRouter()


@router.get("/stats", response_model=DashboardStatsResponse)
def get_dashboard_stats(db: DbSession):
    """Item, low-stock and order counts plus inventory value."""
    return DashboardStatsResponse.model_validate(ReportingService(db).dashboard_stats())


@router.get("/low-stock", response_model=List[LowStockItemResponse])
def get_low_stock(db: DbSession):
    return [LowStockItemResponse.model_validate(entry) for entry in ReportingService(db).low_stock_items()]
