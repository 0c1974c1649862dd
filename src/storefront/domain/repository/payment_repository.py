"""Abstract repository for payments."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.payment import Payment


class PaymentRepository(ABC):

    @abstractmethod
    def get_by_id(self, payment_id: int) -> Payment | None:
        """Return a payment, or None."""

    @abstractmethod
    def get_by_order_id(self, order_id: int) -> Payment | None:
        """Return the payment of an order, or None."""

    @abstractmethod
    def add(self, payment: Payment) -> None:
        """Insert a payment and assign ``payment.id``."""

    @abstractmethod
    def save(self, payment: Payment) -> None:
        """Persist changes to an existing payment."""
