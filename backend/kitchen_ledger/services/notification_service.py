"""Order notification hook.

Delivery channels (WhatsApp, SMS) live outside the engine. They plug in by
implementing OrderNotifier and overriding the get_order_notifier dependency;
the API layer calls the notifier after the order transaction has committed,
and a failing notifier never undoes it.
"""

import logging
from decimal import Decimal
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class OrderNotifier(Protocol):
    def notify_order_saved(
        self, order_id: int, status: str, grand_total: Decimal, phone: Optional[str]
    ) -> None:
        ...


class LoggingOrderNotifier:
    """Default notifier: records the event in the application log."""

    def notify_order_saved(
        self, order_id: int, status: str, grand_total: Decimal, phone: Optional[str]
    ) -> None:
        recipient = phone or "no phone on file"
        logger.info(f"Order {order_id} saved with status {status}, total {grand_total} ({recipient})")


def get_order_notifier() -> OrderNotifier:
    """FastAPI dependency providing the notifier for order routes."""
    return LoggingOrderNotifier()


def send_order_notification(
    notifier: OrderNotifier,
    order_id: int,
    status: str,
    grand_total: Decimal,
    phone: Optional[str] = None,
) -> None:
    """Background-task entry point; failures are logged, never raised."""
    try:
        notifier.notify_order_saved(order_id, status, grand_total, phone)
    except Exception as e:
        logger.error(f"Order notification failed for order {order_id}: {e}", exc_info=True)
