"""Abstract repository for the Cart aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def get_by_id(self, cart_id: int) -> Cart | None:
        """Return a cart with its lines, or None."""

    @abstractmethod
    def get_by_user_id(self, user_id: str) -> Cart | None:
        """Return the user's cart with its lines, or None."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist the cart and make its stored lines match ``cart.lines``.

        Assigns ``cart.id`` and the ids of new lines.
        """
