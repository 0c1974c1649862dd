"""Unit of Work: one failure-atomic group of repository operations.

Usage::

    with uow:
        ...  # read and write through uow.products, uow.carts, ...
        uow.commit()

Leaving the block without ``commit()`` (or through an exception) rolls
everything back.  A unit of work object may be entered again after it
exits; each ``with`` block is a new transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.payment_repository import PaymentRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.reservation_repository import (
    ReservationRepository,
)


class UnitOfWork(ABC):

    products: ProductRepository
    reservations: ReservationRepository
    carts: CartRepository
    orders: OrderRepository
    payments: PaymentRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change since the block opened durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes.  A no-op right after commit."""
