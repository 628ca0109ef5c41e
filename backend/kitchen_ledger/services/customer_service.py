"""Customer Service - the people orders are made for.

A customer can't be removed while they still have work in the kitchen
(PENDING or ONGOING orders). Finished and cancelled orders outlive the
customer: they are detached and keep the customer_name copied onto them.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from kitchen_ledger.core.exceptions import CustomerNotFoundError, ReferenceInUseError
from kitchen_ledger.db.transaction import run_in_transaction
from kitchen_ledger.models.customer import Customer
from kitchen_ledger.models.order import Order, OrderStatus

logger = logging.getLogger(__name__)

_UNSET = object()

# Orders in these states block deleting their customer
OPEN_STATUSES = (OrderStatus.PENDING, OrderStatus.ONGOING)


class CustomerService:
    """Service for maintaining customers."""

    def __init__(self, db: Session):
        self.db = db

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise CustomerNotFoundError(customer_id)
        return customer

    def list_customers(self, search: Optional[str] = None) -> List[Customer]:
        """List customers by name; ``search`` matches name or phone."""
        query = self.db.query(Customer)
        if search:
            pattern = f"%{search}%"
            query = query.filter(Customer.name.ilike(pattern) | Customer.phone.ilike(pattern))
        return query.order_by(Customer.name, Customer.id).all()

    def create_customer(
        self,
        name: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Customer:
        def operation() -> Customer:
            customer = Customer(name=name, phone=phone, address=address)
            self.db.add(customer)
            self.db.flush()
            return customer

        customer = run_in_transaction(self.db, operation, "create_customer")
        logger.info(f"Created customer {customer.id} '{customer.name}'")
        return customer

    def update_customer(
        self,
        customer_id: int,
        name: Optional[str] = None,
        phone=_UNSET,
        address=_UNSET,
    ) -> Customer:
        """Edit a customer. Passing ``phone=None`` or ``address=None`` clears it."""

        def operation() -> Customer:
            customer = self.get_customer(customer_id)
            if name is not None:
                customer.name = name
            if phone is not _UNSET:
                customer.phone = phone
            if address is not _UNSET:
                customer.address = address
            self.db.flush()
            return customer

        customer = run_in_transaction(self.db, operation, "update_customer")
        logger.info(f"Updated customer {customer.id} '{customer.name}'")
        return customer

    def delete_customer(self, customer_id: int) -> None:
        """
        Delete a customer.

        Raises:
            CustomerNotFoundError: unknown customer
            ReferenceInUseError: the customer still has PENDING or ONGOING orders
        """

        def operation() -> None:
            customer = self.get_customer(customer_id)
            open_orders = (
                self.db.query(Order)
                .filter(Order.customer_id == customer_id, Order.status.in_(OPEN_STATUSES))
                .count()
            )
            if open_orders:
                raise ReferenceInUseError("Customer", customer_id, f"{open_orders} open order(s)")
            for order in list(customer.orders):
                order.customer = None
            self.db.delete(customer)

        run_in_transaction(self.db, operation, "delete_customer")
        logger.info(f"Deleted customer {customer_id}")
