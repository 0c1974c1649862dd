"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import Order
from storefront.domain.model.order_status import OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int, for_update: bool = False) -> Order | None:
        """Return an order by its ID, or None if not found.

        With ``for_update`` the order row stays locked until the unit of
        work ends.
        """

    @abstractmethod
    def get_by_order_number(self, order_number: str) -> Order | None:
        """Return an order by its human-readable number, or None."""

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Order]:
        """Return the user's orders, newest first."""

    @abstractmethod
    def list_by_status(self, statuses: set[OrderStatus]) -> list[Order]:
        """Return every order currently in one of ``statuses``."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order with its lines and assign ``order.id``.

        Raises OrderNumberConflictError if the order number is taken; the
        unit of work stays usable so the caller may retry.
        """

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist status changes of an existing order."""
