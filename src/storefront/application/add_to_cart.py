"""Application service: Add To Cart use case.

The hold on the product is sized first; the cart line is written only
if that succeeds.  Both happen in one unit of work, so when anything
after the hold fails, the hold rolls back with it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from storefront.application.dto import CartDTO, cart_to_dto
from storefront.application.ensure_cart import ensure_cart
from storefront.domain.exceptions import ProductNotFoundError
from storefront.domain.model.reservation import DEFAULT_RESERVATION_TTL
from storefront.domain.model.value_objects import Quantity, utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.reservation_service import ReservationService

logger = logging.getLogger(__name__)


class AddToCartHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utc_now,
        reservation_ttl: timedelta = DEFAULT_RESERVATION_TTL,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._reservation_ttl = reservation_ttl

    def handle(self, user_id: str, product_id: str, quantity: int) -> CartDTO:
        """Add ``quantity`` of a product, merging with an existing line.

        Raises ProductNotFoundError or InsufficientStockError.
        """
        added = Quantity(quantity)

        with self._uow as uow:
            if uow.products.get_by_id(product_id) is None:
                raise ProductNotFoundError(f"Product not found: '{product_id}'")

            cart = ensure_cart(uow.carts, user_id)
            line = cart.line_for_product(product_id)
            new_total = added.value + (line.quantity.value if line else 0)

            svc = ReservationService(
                uow.products, uow.reservations, self._clock, self._reservation_ttl
            )
            svc.hold(product_id, cart.id, new_total)  # type: ignore[arg-type]

            cart.add_item(product_id, added.value)
            uow.carts.save(cart)
            dto = cart_to_dto(cart, uow.products)
            uow.commit()

        logger.info(
            "User %s added %d x %s to cart #%s (now %d)",
            user_id, added.value, product_id, cart.id, new_total,
        )
        return dto
