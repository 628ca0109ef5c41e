"""Customer routes."""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from kitchen_ledger.db.session import DbSession
from kitchen_ledger.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from kitchen_ledger.schemas.order import OrderResponse
from kitchen_ledger.services.customer_service import CustomerService

router = APIRouter()


@router.get("/", response_model=List[CustomerResponse])
def list_customers(db: DbSession, search: Optional[str] = Query(None, max_length=255)):
    """List customers, optionally filtered by name or phone."""
    return CustomerService(db).list_customers(search)


@router.post("/", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, db: DbSession):
    return CustomerService(db).create_customer(
        name=data.name, phone=data.phone, address=data.address
    )


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: DbSession):
    return CustomerService(db).get_customer(customer_id)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(customer_id: int, data: CustomerUpdate, db: DbSession):
    changes = data.model_dump(exclude_unset=True)
    return CustomerService(db).update_customer(customer_id, **changes)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: int, db: DbSession):
    """Delete a customer. Refused while they have PENDING or ONGOING orders."""
    CustomerService(db).delete_customer(customer_id)


@router.get("/{customer_id}/orders", response_model=List[OrderResponse])
def list_customer_orders(customer_id: int, db: DbSession):
    """A customer's order history."""
    return CustomerService(db).get_customer(customer_id).orders
