"""Integration tests for status changes, cancellation, refunds and order
queries."""

import pytest

from storefront.application.add_to_cart import AddToCartHandler
from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.create_order import CreateOrderHandler
from storefront.application.refund_order import RefundOrderHandler
from storefront.application.show_order import ListOrdersHandler, ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import (
    InternalError,
    InvalidTransitionError,
    NotCancellableError,
    OrderNotFoundError,
    RefundAmountExceededError,
    UnauthorizedError,
)
from storefront.domain.model.payment import PaymentStatus
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Address, Money
from storefront.infrastructure.payment.stored_payment_gateway import (
    StoredPaymentGateway,
)
from tests.fakes import FakeClock, FakeStore, FakeUnitOfWork

ADDRESS = Address("Jane Doe", "1 Main St", "Springfield", "US", "12345")


class _World:
    """Fake store plus the collaborators every handler needs."""

    def __init__(self) -> None:
        self.store = FakeStore([
            Product(id="P1", name="Widget", price=Money.of("10.00"), stock_quantity=10),
            Product(id="P2", name="Gadget", price=Money.of("4.50"), stock_quantity=5),
        ])
        self.uow = FakeUnitOfWork(self.store)
        self.clock = FakeClock()
        self.gateway = StoredPaymentGateway(FakeUnitOfWork(self.store))

    def place_order(self, user_id: str = "alice", method: str = "cod", **lines: int) -> int:
        for product_id, qty in (lines or {"P1": 2}).items():
            AddToCartHandler(self.uow, self.clock).handle(user_id, product_id, qty)
        handler = CreateOrderHandler(self.uow, self.gateway, self.clock)
        return handler.handle(user_id, ADDRESS, ADDRESS, method).id

    def move(self, order_id: int, *targets: str):
        handler = UpdateOrderStatusHandler(self.uow, self.gateway, self.clock)
        dto = None
        for target in targets:
            dto = handler.handle(order_id, target)
        return dto

    def stock(self, product_id: str) -> int:
        return self.uow.products.get_by_id(product_id).stock_quantity


class TestUpdateOrderStatus:

    def test_walks_the_happy_path(self):
        world = _World()
        order_id = world.place_order()
        dto = world.move(order_id, "processing", "shipped", "delivered", "completed")
        assert dto.status == "completed"

    def test_shipped_cannot_go_back_to_pending(self):
        world = _World()
        order_id = world.place_order()
        world.move(order_id, "processing", "shipped")
        with pytest.raises(InvalidTransitionError):
            world.move(order_id, "pending")
        assert world.uow.orders.get_by_id(order_id).status.value == "shipped"

    def test_completed_cannot_be_shipped(self):
        world = _World()
        order_id = world.place_order()
        world.move(order_id, "processing", "delivered", "completed")
        with pytest.raises(InvalidTransitionError):
            world.move(order_id, "shipped")

    def test_same_status_is_noop(self):
        world = _World()
        order_id = world.place_order()
        before = world.uow.commits
        dto = world.move(order_id, "pending")
        assert dto.status == "pending"
        assert world.uow.commits == before

    def test_status_change_stamps_clock_time(self):
        world = _World()
        order_id = world.place_order()
        world.clock.advance(hours=2)
        world.move(order_id, "processing")
        assert world.uow.orders.get_by_id(order_id).updated_at == world.clock.now

    def test_cancelling_through_status_restores_stock(self):
        world = _World()
        order_id = world.place_order(P1=3, P2=2)
        world.move(order_id, "cancelled")
        assert world.stock("P1") == 10
        assert world.stock("P2") == 5

    def test_unknown_order(self):
        world = _World()
        with pytest.raises(OrderNotFoundError):
            world.move(999, "processing")

    def test_unknown_status(self):
        world = _World()
        order_id = world.place_order()
        with pytest.raises(InvalidTransitionError, match="Unknown order status"):
            world.move(order_id, "teleported")


class TestCashOnDelivery:

    def test_delivery_issues_payment(self):
        world = _World()
        order_id = world.place_order(method="cod")
        assert world.uow.payments.get_by_order_id(order_id) is None

        world.move(order_id, "processing", "shipped", "delivered")

        payment = world.uow.payments.get_by_order_id(order_id)
        assert payment.status == PaymentStatus.COMPLETED
        assert payment.amount == Money.of("20.00")

    def test_payment_issued_once(self):
        world = _World()
        order_id = world.place_order(method="cod")
        world.move(order_id, "processing", "delivered", "return_requested", "delivered")
        assert len(world.store.payments) == 1

    def test_prepaid_delivery_adds_no_payment(self):
        world = _World()
        order_id = world.place_order(method="dc")
        world.move(order_id, "shipped", "delivered")
        assert len(world.store.payments) == 1


class TestCancelOrder:

    def test_cancel_processing_restores_exactly(self):
        world = _World()
        order_id = world.place_order(method="cc", P1=4, P2=1)
        assert world.stock("P1") == 6

        dto = CancelOrderHandler(world.uow, world.clock).handle(order_id, "alice")

        assert dto.status == "cancelled"
        assert world.stock("P1") == 10
        assert world.stock("P2") == 5

    def test_second_cancel_refused_and_stock_unchanged(self):
        world = _World()
        order_id = world.place_order()
        handler = CancelOrderHandler(world.uow, world.clock)
        handler.handle(order_id, "alice")
        with pytest.raises(NotCancellableError):
            handler.handle(order_id, "alice")
        assert world.stock("P1") == 10

    def test_shipped_not_cancellable(self):
        world = _World()
        order_id = world.place_order()
        world.move(order_id, "processing", "shipped")
        with pytest.raises(NotCancellableError, match="shipped"):
            CancelOrderHandler(world.uow, world.clock).handle(order_id, "alice")
        assert world.stock("P1") == 8

    def test_other_user_unauthorized(self):
        world = _World()
        order_id = world.place_order()
        with pytest.raises(UnauthorizedError):
            CancelOrderHandler(world.uow, world.clock).handle(order_id, "mallory")
        assert world.stock("P1") == 8

    def test_unknown_order(self):
        world = _World()
        with pytest.raises(OrderNotFoundError):
            CancelOrderHandler(world.uow, world.clock).handle(999, "alice")


class TestRefundOrder:

    def test_full_refund_restores_stock(self):
        world = _World()
        order_id = world.place_order(method="cc")
        world.move(order_id, "delivered", "return_requested")

        dto = RefundOrderHandler(world.uow, world.gateway, world.clock).handle(order_id)

        assert dto.status == "refunded"
        assert world.stock("P1") == 10
        payment = world.uow.payments.get_by_order_id(order_id)
        assert payment.status == PaymentStatus.REFUNDED
        assert payment.refunded_amount == Money.of("20.00")

    def test_partial_refund(self):
        world = _World()
        order_id = world.place_order(method="cc")
        world.move(order_id, "delivered", "return_requested")
        RefundOrderHandler(world.uow, world.gateway, world.clock).handle(order_id, "5.00")
        payment = world.uow.payments.get_by_order_id(order_id)
        assert payment.refunded_amount == Money.of("5.00")

    def test_refund_requires_return_request(self):
        world = _World()
        order_id = world.place_order(method="cc")
        with pytest.raises(InvalidTransitionError):
            RefundOrderHandler(world.uow, world.gateway, world.clock).handle(order_id)
        assert world.uow.payments.get_by_order_id(order_id).status == PaymentStatus.COMPLETED

    def test_refund_more_than_paid(self):
        world = _World()
        order_id = world.place_order(method="cc")
        world.move(order_id, "delivered", "return_requested")
        with pytest.raises(RefundAmountExceededError):
            RefundOrderHandler(world.uow, world.gateway, world.clock).handle(order_id, "50.00")
        assert world.uow.orders.get_by_id(order_id).status.value == "return_requested"
        assert world.stock("P1") == 8

    def test_retry_after_failed_status_write_finishes_the_refund(self):
        world = _World()
        order_id = world.place_order(method="cc")
        world.move(order_id, "delivered", "return_requested")
        save = world.uow.orders.save
        failures = [InternalError("Storage failure")]

        def flaky_save(order):
            if failures:
                raise failures.pop()
            save(order)

        world.uow.orders.save = flaky_save
        handler = RefundOrderHandler(world.uow, world.gateway, world.clock)
        with pytest.raises(InternalError):
            handler.handle(order_id)
        assert world.uow.payments.get_by_order_id(order_id).status == PaymentStatus.REFUNDED
        assert world.uow.orders.get_by_id(order_id).status.value == "return_requested"
        assert world.stock("P1") == 8

        dto = handler.handle(order_id)

        assert dto.status == "refunded"
        assert world.stock("P1") == 10
        payment = world.uow.payments.get_by_order_id(order_id)
        assert payment.refunded_amount == Money.of("20.00")

    def test_refunding_a_refunded_order_changes_nothing(self):
        world = _World()
        order_id = world.place_order(method="cc")
        world.move(order_id, "delivered", "return_requested")
        handler = RefundOrderHandler(world.uow, world.gateway, world.clock)
        handler.handle(order_id)

        dto = handler.handle(order_id)

        assert dto.status == "refunded"
        assert world.stock("P1") == 10


class TestOrderQueries:

    def test_show_own_order(self):
        world = _World()
        order_id = world.place_order()
        dto = ShowOrderHandler(world.uow).handle(order_id, user_id="alice")
        assert dto.id == order_id

    def test_show_other_users_order(self):
        world = _World()
        order_id = world.place_order()
        with pytest.raises(UnauthorizedError):
            ShowOrderHandler(world.uow).handle(order_id, user_id="bob")

    def test_lists_only_own_orders(self):
        world = _World()
        first = world.place_order(P1=1)
        second = world.place_order(P2=1)
        world.place_order("bob", P1=1)

        orders = ListOrdersHandler(world.uow).handle("alice")

        assert {o.id for o in orders} == {first, second}
        assert len(orders) == 2
