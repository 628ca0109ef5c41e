"""Tests for customer maintenance and the order link."""

import pytest

from kitchen_ledger.core.exceptions import CustomerNotFoundError, ReferenceInUseError
from kitchen_ledger.models.order import Order, OrderStatus
from kitchen_ledger.services.customer_service import CustomerService
from kitchen_ledger.services.order_stock_service import OrderLineInput, OrderStockService


@pytest.fixture
def asha(db_session):
    return CustomerService(db_session).create_customer(
        name="Asha", phone="+910000000001", address="12 Baker Street"
    )


class TestCustomerService:
    def test_create_and_get(self, db_session, asha):
        customer = CustomerService(db_session).get_customer(asha.id)
        assert customer.name == "Asha"
        assert customer.phone == "+910000000001"

    def test_list_sorted_and_searchable(self, db_session, asha):
        svc = CustomerService(db_session)
        svc.create_customer(name="Bilal", phone="+910000000002")
        assert [c.name for c in svc.list_customers()] == ["Asha", "Bilal"]
        assert [c.name for c in svc.list_customers("0002")] == ["Bilal"]
        assert [c.name for c in svc.list_customers("ash")] == ["Asha"]

    def test_update_keeps_unset_fields(self, db_session, asha):
        customer = CustomerService(db_session).update_customer(asha.id, name="Asha K")
        assert customer.name == "Asha K"
        assert customer.phone == "+910000000001"
        assert customer.address == "12 Baker Street"

    def test_update_clears_phone(self, db_session, asha):
        customer = CustomerService(db_session).update_customer(asha.id, phone=None)
        assert customer.phone is None

    def test_unknown_customer(self, db_session):
        with pytest.raises(CustomerNotFoundError):
            CustomerService(db_session).get_customer(7)
        with pytest.raises(CustomerNotFoundError):
            CustomerService(db_session).delete_customer(7)


class TestDeleteCustomer:
    def test_delete_without_orders(self, db_session, asha):
        CustomerService(db_session).delete_customer(asha.id)
        with pytest.raises(CustomerNotFoundError):
            CustomerService(db_session).get_customer(asha.id)

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.ONGOING])
    def test_refused_while_order_open(self, db_session, asha, bread, status):
        OrderStockService(db_session).create_order(
            lines=[OrderLineInput(recipe_id=bread.id, quantity=1)], status=status, customer_id=asha.id
        )
        with pytest.raises(ReferenceInUseError):
            CustomerService(db_session).delete_customer(asha.id)
        assert CustomerService(db_session).get_customer(asha.id).name == "Asha"

    def test_finished_orders_are_detached(self, db_session, asha, bread):
        orders = OrderStockService(db_session)
        completed = orders.create_order(
            lines=[OrderLineInput(recipe_id=bread.id, quantity=1)],
            status=OrderStatus.COMPLETED,
            customer_id=asha.id,
        )
        cancelled = orders.create_order(
            lines=[OrderLineInput(recipe_id=bread.id, quantity=1)], customer_id=asha.id
        )
        orders.cancel_order(cancelled.id)

        CustomerService(db_session).delete_customer(asha.id)

        for order_id in (completed.id, cancelled.id):
            order = db_session.get(Order, order_id)
            assert order.customer_id is None
            assert order.customer_name == "Asha"
        # The completed order still holds its reservation
        assert db_session.get(Order, completed.id).stock_reserved is True


class TestOrderCustomerLink:
    def test_create_copies_customer_name(self, db_session, asha, bread):
        order = OrderStockService(db_session).create_order(
            lines=[OrderLineInput(recipe_id=bread.id, quantity=1)], customer_id=asha.id
        )
        assert order.customer.phone == "+910000000001"
        assert order.customer_name == "Asha"

    def test_explicit_name_wins(self, db_session, asha, bread):
        order = OrderStockService(db_session).create_order(
            lines=[OrderLineInput(recipe_id=bread.id, quantity=1)],
            customer_id=asha.id,
            customer_name="Asha (office)",
        )
        assert order.customer_name == "Asha (office)"

    def test_unknown_customer_rolls_back(self, db_session, bread):
        with pytest.raises(CustomerNotFoundError):
            OrderStockService(db_session).create_order(
                lines=[OrderLineInput(recipe_id=bread.id, quantity=1)], customer_id=99
            )
        assert db_session.query(Order).count() == 0

    def test_update_reassigns_customer(self, db_session, asha, bread):
        svc = OrderStockService(db_session)
        bilal = CustomerService(db_session).create_customer(name="Bilal")
        order = svc.create_order(lines=[OrderLineInput(recipe_id=bread.id, quantity=1)], customer_id=asha.id)
        order = svc.update_order(order.id, customer_id=bilal.id)
        assert order.customer_id == bilal.id
        assert [o.id for o in CustomerService(db_session).get_customer(bilal.id).orders] == [order.id]
