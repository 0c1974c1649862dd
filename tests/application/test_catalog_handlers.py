"""Integration tests for the product, inventory and housekeeping use cases."""

import pytest

from storefront.application.add_product import AddProductHandler
from storefront.application.add_to_cart import AddToCartHandler
from storefront.application.purge_reservations import PurgeExpiredReservationsHandler
from storefront.application.set_inventory import SetInventoryHandler
from storefront.application.show_inventory import ShowInventoryHandler
from storefront.domain.exceptions import ProductNotFoundError, ValidationError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from tests.fakes import FakeClock, FakeStore, FakeUnitOfWork


def _setup(products: list[Product] | None = None) -> tuple[FakeUnitOfWork, FakeClock]:
    return FakeUnitOfWork(FakeStore(products)), FakeClock()


class TestAddProduct:

    def test_auto_assigns_numeric_ids(self):
        uow, _ = _setup()
        handler = AddProductHandler(uow)
        first = handler.handle("Widget", "15.00", stock=5)
        second = handler.handle("Gadget", "25.00")
        assert (first.id, second.id) == ("1", "2")
        assert uow.products.get_by_id("1").stock_quantity == 5

    def test_explicit_id(self):
        uow, _ = _setup()
        product = AddProductHandler(uow).handle("Widget", "15.00", product_id="W-1")
        assert uow.products.get_by_id("W-1") == product

    def test_duplicate_name_rejected(self):
        uow, _ = _setup()
        handler = AddProductHandler(uow)
        handler.handle("Widget", "15.00")
        with pytest.raises(ValidationError, match="already exists"):
            handler.handle("widget", "10.00")

    def test_non_positive_price_rejected(self):
        uow, _ = _setup()
        with pytest.raises(ValidationError, match="greater than zero"):
            AddProductHandler(uow).handle("Widget", "0")

    def test_negative_stock_rejected(self):
        uow, _ = _setup()
        with pytest.raises(ValidationError):
            AddProductHandler(uow).handle("Widget", "1.00", stock=-1)
        assert uow.products.list_all() == []


class TestSetInventory:

    def test_sets_stock(self):
        uow, clock = _setup([Product(id="P1", name="Widget", price=Money.of("1.00"), stock_quantity=3)])
        SetInventoryHandler(uow, clock).handle("P1", 12)
        assert uow.products.get_by_id("P1").stock_quantity == 12

    def test_cannot_drop_below_held(self):
        uow, clock = _setup([Product(id="P1", name="Widget", price=Money.of("1.00"), stock_quantity=5)])
        AddToCartHandler(uow, clock).handle("alice", "P1", 4)
        with pytest.raises(ValidationError, match="4 currently held"):
            SetInventoryHandler(uow, clock).handle("P1", 3)
        assert uow.products.get_by_id("P1").stock_quantity == 5

    def test_unknown_product(self):
        uow, clock = _setup()
        with pytest.raises(ProductNotFoundError):
            SetInventoryHandler(uow, clock).handle("NOPE", 1)


class TestShowInventory:

    def test_reports_held_and_available(self):
        uow, clock = _setup([
            Product(id="P1", name="Widget", price=Money.of("1.00"), stock_quantity=5),
            Product(id="P2", name="Gadget", price=Money.of("2.00"), stock_quantity=2),
        ])
        AddToCartHandler(uow, clock).handle("alice", "P1", 3)

        lines = {line.product_id: line for line in ShowInventoryHandler(uow, clock).handle()}

        assert (lines["P1"].total, lines["P1"].reserved, lines["P1"].available) == (5, 3, 2)
        assert (lines["P2"].total, lines["P2"].reserved, lines["P2"].available) == (2, 0, 2)


class TestPurgeExpiredReservations:

    def test_purges_only_expired(self):
        uow, clock = _setup([Product(id="P1", name="Widget", price=Money.of("1.00"), stock_quantity=5)])
        AddToCartHandler(uow, clock).handle("alice", "P1", 1)
        clock.advance(minutes=9)
        AddToCartHandler(uow, clock).handle("bob", "P1", 1)
        clock.advance(minutes=2)

        assert PurgeExpiredReservationsHandler(uow, clock).handle() == 1
        assert len(uow.store.reservations) == 1
