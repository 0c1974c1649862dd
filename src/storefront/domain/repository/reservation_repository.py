"""Abstract repository for stock reservations (holds)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from storefront.domain.model.reservation import Reservation


class ReservationRepository(ABC):

    @abstractmethod
    def get(self, product_id: str, cart_id: int) -> Reservation | None:
        """Return the hold for (product, cart), expired or not."""

    @abstractmethod
    def list_for_cart(self, cart_id: int) -> list[Reservation]:
        """Return every hold of a cart."""

    @abstractmethod
    def reserved_quantity(
        self,
        product_id: str,
        now: datetime,
        excluding_cart_id: int | None = None,
    ) -> int:
        """Sum of unexpired holds on a product, optionally skipping one cart."""

    @abstractmethod
    def upsert(self, reservation: Reservation) -> None:
        """Insert the hold or overwrite the existing (product, cart) row."""

    @abstractmethod
    def delete(self, product_id: str, cart_id: int) -> None:
        """Delete a hold.  Deleting a missing hold is not an error."""

    @abstractmethod
    def delete_for_cart(self, cart_id: int) -> int:
        """Delete every hold of a cart and return how many went."""

    @abstractmethod
    def delete_expired(self, now: datetime) -> int:
        """Delete holds that expired at or before ``now``."""
