"""Integration tests for post-commit payment side effects and their
reconciliation."""

from storefront.application.add_to_cart import AddToCartHandler
from storefront.application.create_order import CreateOrderHandler
from storefront.application.payment_effects import issue_payment
from storefront.application.reconcile_payments import ReconcilePaymentsHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.model.order import PaymentMethod
from storefront.domain.model.payment import PaymentStatus
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Address, Money
from storefront.infrastructure.payment.stored_payment_gateway import (
    StoredPaymentGateway,
)
from tests.fakes import FailingPaymentGateway, FakeClock, FakeStore, FakeUnitOfWork

ADDRESS = Address("Jane Doe", "1 Main St", "Springfield", "US", "12345")


def _setup() -> tuple[FakeUnitOfWork, FakeClock, StoredPaymentGateway]:
    store = FakeStore([
        Product(id="P1", name="Widget", price=Money.of("10.00"), stock_quantity=10),
    ])
    return FakeUnitOfWork(store), FakeClock(), StoredPaymentGateway(FakeUnitOfWork(store))


def _place(uow, clock, gateway, method: str) -> int:
    AddToCartHandler(uow, clock).handle("alice", "P1", 2)
    return CreateOrderHandler(uow, gateway, clock).handle("alice", ADDRESS, ADDRESS, method).id


class TestIssuePayment:

    def test_idempotent(self):
        uow, clock, gateway = _setup()
        order_id = _place(uow, clock, gateway, "cod")
        first = issue_payment(gateway, order_id, PaymentMethod.CASH_ON_DELIVERY)
        second = issue_payment(gateway, order_id, PaymentMethod.CASH_ON_DELIVERY)
        assert first.id == second.id
        assert len(uow.store.payments) == 1

    def test_failure_returns_none(self):
        uow, clock, gateway = _setup()
        order_id = _place(uow, clock, gateway, "cod")
        assert issue_payment(FailingPaymentGateway(), order_id, PaymentMethod.CASH_ON_DELIVERY) is None


class TestGatewayDown:

    def test_prepaid_order_stays_pending(self):
        uow, clock, _ = _setup()
        failing = FailingPaymentGateway()

        order_id = _place(uow, clock, failing, "cc")

        order = uow.orders.get_by_id(order_id)
        assert order.status.value == "pending"
        assert failing.calls == 1
        assert uow.products.get_by_id("P1").stock_quantity == 8
        assert uow.carts.get_by_user_id("alice").is_empty

    def test_cod_delivery_still_recorded(self):
        uow, clock, _ = _setup()
        failing = FailingPaymentGateway()
        order_id = _place(uow, clock, failing, "cod")

        handler = UpdateOrderStatusHandler(uow, failing, clock)
        handler.handle(order_id, "processing")
        dto = handler.handle(order_id, "delivered")

        assert dto.status == "delivered"
        assert uow.payments.get_by_order_id(order_id) is None


class TestReconcilePayments:

    def test_repairs_unpaid_prepaid_order(self):
        uow, clock, gateway = _setup()
        order_id = _place(uow, clock, FailingPaymentGateway(), "cc")
        number = uow.orders.get_by_id(order_id).order_number

        repaired = ReconcilePaymentsHandler(uow, gateway, clock).handle()

        assert repaired == [number]
        assert uow.orders.get_by_id(order_id).status.value == "processing"
        assert uow.payments.get_by_order_id(order_id).status == PaymentStatus.COMPLETED

    def test_repairs_delivered_cod_order(self):
        uow, clock, gateway = _setup()
        failing = FailingPaymentGateway()
        order_id = _place(uow, clock, failing, "cod")
        handler = UpdateOrderStatusHandler(uow, failing, clock)
        handler.handle(order_id, "processing")
        handler.handle(order_id, "delivered")

        repaired = ReconcilePaymentsHandler(uow, gateway, clock).handle()

        assert len(repaired) == 1
        assert uow.payments.get_by_order_id(order_id) is not None

    def test_leaves_pending_cod_orders_alone(self):
        uow, clock, gateway = _setup()
        order_id = _place(uow, clock, gateway, "cod")
        assert ReconcilePaymentsHandler(uow, gateway, clock).handle() == []
        assert uow.payments.get_by_order_id(order_id) is None

    def test_nothing_to_do_when_gateway_still_down(self):
        uow, clock, _ = _setup()
        failing = FailingPaymentGateway()
        order_id = _place(uow, clock, failing, "cc")
        assert ReconcilePaymentsHandler(uow, failing, clock).handle() == []
        assert uow.orders.get_by_id(order_id).status.value == "pending"
