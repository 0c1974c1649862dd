"""Domain service: Reservation Store.

Holds are temporary claims against a product's stock, one per
(product, cart).  Every check-then-write runs after taking the product's
serialization token, so two carts racing for the last units of the same
product are handled one after the other and can never both win.

The TTL only guards against abandoned carts.  Oversell is prevented by
the locked check-and-write, not by expiry.

None of these methods commit: the caller's unit of work decides.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from storefront.domain.exceptions import InsufficientStockError, ProductNotFoundError
from storefront.domain.model.reservation import DEFAULT_RESERVATION_TTL, Reservation
from storefront.domain.model.value_objects import Quantity, utc_now
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.reservation_repository import (
    ReservationRepository,
)
from storefront.domain.service.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class ReservationService:

    def __init__(
        self,
        product_repo: ProductRepository,
        reservation_repo: ReservationRepository,
        clock: Callable[[], datetime] = utc_now,
        ttl: timedelta = DEFAULT_RESERVATION_TTL,
    ) -> None:
        self._product_repo = product_repo
        self._reservation_repo = reservation_repo
        self._clock = clock
        self._ttl = ttl
        self._ledger = InventoryLedger(product_repo, reservation_repo, clock)

    def reserve(self, product_id: str, cart_id: int, quantity: int) -> Reservation:
        """Add ``quantity`` to the cart's hold on a product.

        The candidate total is the existing hold plus the request; it must
        fit in the ledger quantity minus every other cart's unexpired holds.
        """
        requested = Quantity(quantity).value
        return self._write(
            product_id, cart_id, lambda existing: existing + requested
        )

    def hold(self, product_id: str, cart_id: int, quantity: int) -> Reservation:
        """Set the cart's hold on a product to exactly ``quantity``.

        Growing a hold is checked like ``reserve``.  Shrinking an unexpired
        hold never fails; an expired hold counts as nothing held, so any
        quantity is checked.
        """
        target = Quantity(quantity).value
        return self._write(product_id, cart_id, lambda existing: target)

    def release(self, product_id: str, cart_id: int) -> None:
        """Drop the hold.  Absence is not an error."""
        self._reservation_repo.delete(product_id, cart_id)

    def release_cart(self, cart_id: int) -> int:
        return self._reservation_repo.delete_for_cart(cart_id)

    def purge_expired(self) -> int:
        """Physically delete expired holds.  Hygiene only: reads already
        ignore them."""
        purged = self._reservation_repo.delete_expired(self._clock())
        if purged:
            logger.info("Purged %d expired reservation(s)", purged)
        return purged

    def available_stock(self, product_id: str, excluding_cart_id: int | None = None) -> int:
        return self._ledger.available_stock(product_id, excluding_cart_id)

    # --- Internal helpers -----------------------------------------------------

    def _write(
        self,
        product_id: str,
        cart_id: int,
        target_for: Callable[[int], int],
    ) -> Reservation:
        product = self._product_repo.lock_for_update(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product not found: '{product_id}'")

        now = self._clock()
        existing = self._reservation_repo.get(product_id, cart_id)
        target = target_for(existing.quantity if existing else 0)
        currently_held = existing.active_quantity(now) if existing else 0

        if target > currently_held:
            available = self._ledger.available_for(product, now, excluding_cart_id=cart_id)
            if target > available:
                logger.info(
                    "Reservation refused: cart %s wants %d of product %s, %d available",
                    cart_id, target, product_id, available,
                )
                raise InsufficientStockError(product_id, target, max(available, 0))

        expires_at = now + self._ttl
        if existing is None:
            reservation = Reservation(
                product_id=product_id,
                cart_id=cart_id,
                quantity=target,
                expires_at=expires_at,
            )
        else:
            reservation = existing
            reservation.refresh(target, expires_at)
        self._reservation_repo.upsert(reservation)
        return reservation
