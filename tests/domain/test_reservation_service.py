"""Unit tests for the ReservationService and InventoryLedger domain services."""

from datetime import timedelta

import pytest

from storefront.domain.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.domain.model.order import Order, OrderLineItem, PaymentMethod
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Address, Money, Quantity
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.reservation_service import ReservationService
from tests.fakes import FakeClock, FakeStore, FakeUnitOfWork


def _setup(stock: int = 10) -> tuple[ReservationService, FakeUnitOfWork, FakeClock]:
    store = FakeStore([Product(id="P1", name="Widget", price=Money.of("10.00"), stock_quantity=stock)])
    uow = FakeUnitOfWork(store)
    clock = FakeClock()
    svc = ReservationService(uow.products, uow.reservations, clock, timedelta(minutes=10))
    return svc, uow, clock


class TestReserve:

    def test_reserve_creates_hold(self):
        svc, uow, clock = _setup()
        hold = svc.reserve("P1", 1, 3)
        assert hold.quantity == 3
        assert hold.expires_at == clock.now + timedelta(minutes=10)
        assert svc.available_stock("P1") == 7

    def test_reserve_is_additive(self):
        svc, uow, _ = _setup()
        svc.reserve("P1", 1, 3)
        svc.reserve("P1", 1, 2)
        assert uow.reservations.get("P1", 1).quantity == 5

    def test_reserve_refreshes_expiry(self):
        svc, uow, clock = _setup()
        svc.reserve("P1", 1, 1)
        clock.advance(minutes=5)
        svc.reserve("P1", 1, 1)
        assert uow.reservations.get("P1", 1).expires_at == clock.now + timedelta(minutes=10)

    def test_other_carts_holds_count(self):
        svc, _, _ = _setup(stock=5)
        svc.reserve("P1", 1, 4)
        with pytest.raises(InsufficientStockError) as exc_info:
            svc.reserve("P1", 2, 2)
        assert exc_info.value.available == 1

    def test_own_hold_not_counted_twice(self):
        svc, _, _ = _setup(stock=5)
        svc.reserve("P1", 1, 3)
        svc.reserve("P1", 1, 2)
        with pytest.raises(InsufficientStockError):
            svc.reserve("P1", 1, 1)

    def test_refused_request_leaves_hold_untouched(self):
        svc, uow, _ = _setup(stock=5)
        svc.reserve("P1", 1, 3)
        with pytest.raises(InsufficientStockError):
            svc.reserve("P1", 1, 3)
        assert uow.reservations.get("P1", 1).quantity == 3

    def test_unknown_product(self):
        svc, _, _ = _setup()
        with pytest.raises(ProductNotFoundError):
            svc.reserve("NOPE", 1, 1)

    def test_non_positive_quantity(self):
        svc, _, _ = _setup()
        with pytest.raises(ValidationError):
            svc.reserve("P1", 1, 0)


class TestHold:

    def test_hold_sets_exact_quantity(self):
        svc, uow, _ = _setup()
        svc.hold("P1", 1, 4)
        svc.hold("P1", 1, 2)
        assert uow.reservations.get("P1", 1).quantity == 2

    def test_shrinking_never_fails(self):
        svc, uow, _ = _setup(stock=5)
        svc.hold("P1", 1, 5)
        uow.products.adjust_stock("P1", -3)
        svc.hold("P1", 1, 1)
        assert uow.reservations.get("P1", 1).quantity == 1

    def test_growing_is_checked(self):
        svc, _, _ = _setup(stock=5)
        svc.hold("P1", 1, 2)
        svc.hold("P1", 2, 2)
        with pytest.raises(InsufficientStockError):
            svc.hold("P1", 1, 4)


class TestExpiry:

    def test_expired_hold_excluded_from_available(self):
        svc, _, clock = _setup(stock=10)
        svc.reserve("P1", 1, 3)
        clock.advance(minutes=10)
        assert svc.available_stock("P1") == 10

    def test_expired_hold_frees_stock_for_others(self):
        svc, _, clock = _setup(stock=3)
        svc.reserve("P1", 1, 3)
        clock.advance(minutes=11)
        assert svc.reserve("P1", 2, 3).quantity == 3

    def test_purge_expired(self):
        svc, uow, clock = _setup()
        svc.reserve("P1", 1, 1)
        clock.advance(minutes=3)
        svc.reserve("P1", 2, 1)
        clock.advance(minutes=8)
        assert svc.purge_expired() == 1
        assert uow.reservations.get("P1", 1) is None
        assert uow.reservations.get("P1", 2) is not None


class TestRelease:

    def test_release_is_idempotent(self):
        svc, uow, _ = _setup()
        svc.reserve("P1", 1, 2)
        svc.release("P1", 1)
        svc.release("P1", 1)
        assert uow.reservations.get("P1", 1) is None
        assert svc.available_stock("P1") == 10

    def test_release_cart(self):
        store = FakeStore([
            Product(id="P1", name="Widget", price=Money.of("10.00"), stock_quantity=5),
            Product(id="P2", name="Gadget", price=Money.of("5.00"), stock_quantity=5),
        ])
        uow = FakeUnitOfWork(store)
        svc = ReservationService(uow.products, uow.reservations, FakeClock())
        svc.reserve("P1", 1, 1)
        svc.reserve("P2", 1, 1)
        svc.reserve("P2", 2, 1)
        assert svc.release_cart(1) == 2
        assert uow.reservations.list_for_cart(1) == []
        assert len(uow.reservations.list_for_cart(2)) == 1


class TestInventoryLedger:

    def test_adjust_stock(self):
        _, uow, clock = _setup(stock=10)
        ledger = InventoryLedger(uow.products, uow.reservations, clock)
        assert ledger.adjust_stock("P1", -4) == 6
        assert ledger.adjust_stock("P1", 2) == 8

    def test_adjust_below_zero_refused(self):
        _, uow, clock = _setup(stock=2)
        ledger = InventoryLedger(uow.products, uow.reservations, clock)
        with pytest.raises(InsufficientStockError):
            ledger.adjust_stock("P1", -3)
        assert uow.products.get_by_id("P1").stock_quantity == 2

    def test_available_for_unknown_product(self):
        _, uow, clock = _setup()
        ledger = InventoryLedger(uow.products, uow.reservations, clock)
        with pytest.raises(ProductNotFoundError):
            ledger.available_stock("NOPE")

    def test_restore_for_order(self):
        _, uow, clock = _setup(stock=4)
        ledger = InventoryLedger(uow.products, uow.reservations, clock)
        address = Address("Jane Doe", "1 Main St", "Springfield", "US", "12345")
        order = Order.create(
            user_id="alice",
            items=[OrderLineItem("P1", "Widget", Quantity(3), Money.of("10.00"))],
            payment_method=PaymentMethod.CASH_ON_DELIVERY,
            shipping_address=address,
            billing_address=address,
        )
        ledger.restore_for_order(order)
        assert uow.products.get_by_id("P1").stock_quantity == 7
