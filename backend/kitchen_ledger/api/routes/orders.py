"""Customer order routes."""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from kitchen_ledger.db.session import DbSession
from kitchen_ledger.models.order import Order, OrderStatus
from kitchen_ledger.schemas.order import (
    OrderCreate,
    OrderFinancialsResponse,
    OrderResponse,
    OrderUpdate,
)
from kitchen_ledger.services.notification_service import (
    OrderNotifier,
    get_order_notifier,
    send_order_notification,
)
from kitchen_ledger.services.order_stock_service import OrderLineInput, OrderStockService
from kitchen_ledger.services.reporting_service import ReportingService

router = APIRouter()


def _line_inputs(lines) -> List[OrderLineInput]:
    return [
        OrderLineInput(recipe_id=line.recipe_id, quantity=line.quantity, selling_price=line.selling_price)
        for line in lines
    ]


def _notify(background_tasks: BackgroundTasks, notifier: OrderNotifier, order: Order) -> None:
    phone = order.customer.phone if order.customer is not None else None
    background_tasks.add_task(
        send_order_notification, notifier, order.id, order.status.value, order.grand_total, phone
    )


@router.get("/", response_model=List[OrderResponse])
def list_orders(db: DbSession, status_filter: Optional[OrderStatus] = Query(None, alias="status")):
    """List orders, newest first."""
    return OrderStockService(db).list_orders(status_filter)


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    data: OrderCreate,
    db: DbSession,
    background_tasks: BackgroundTasks,
    notifier: OrderNotifier = Depends(get_order_notifier),
):
    """Create an order. ONGOING and COMPLETED orders reserve stock immediately."""
    order = OrderStockService(db).create_order(
        lines=_line_inputs(data.lines),
        status=data.status,
        customer_name=data.customer_name,
        order_date=data.order_date,
        customer_id=data.customer_id,
    )
    _notify(background_tasks, notifier, order)
    return order


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: DbSession):
    return OrderStockService(db).get_order(order_id)


@router.put("/{order_id}", response_model=OrderResponse)
def update_order(
    order_id: int,
    data: OrderUpdate,
    db: DbSession,
    background_tasks: BackgroundTasks,
    notifier: OrderNotifier = Depends(get_order_notifier),
):
    """Change status and/or replace lines; stock follows the transition."""
    order = OrderStockService(db).update_order(
        order_id,
        status=data.status,
        lines=_line_inputs(data.lines) if data.lines is not None else None,
        customer_name=data.customer_name,
        customer_id=data.customer_id,
    )
    _notify(background_tasks, notifier, order)
    return order


@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: int, db: DbSession):
    """Cancel an order and release its stock."""
    return OrderStockService(db).cancel_order(order_id)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: int, db: DbSession):
    OrderStockService(db).delete_order(order_id)


@router.get("/{order_id}/financials", response_model=OrderFinancialsResponse)
def get_order_financials(order_id: int, db: DbSession):
    """Revenue, cost and profit for an order."""
    return OrderFinancialsResponse.model_validate(ReportingService(db).order_financials(order_id))
