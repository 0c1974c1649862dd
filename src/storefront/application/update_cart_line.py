"""Application service: Update Cart Line use case."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from storefront.application.dto import CartDTO, cart_to_dto
from storefront.domain.exceptions import CartLineNotFoundError
from storefront.domain.model.reservation import DEFAULT_RESERVATION_TTL
from storefront.domain.model.value_objects import Quantity, utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.reservation_service import ReservationService

logger = logging.getLogger(__name__)


class UpdateCartLineHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utc_now,
        reservation_ttl: timedelta = DEFAULT_RESERVATION_TTL,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._reservation_ttl = reservation_ttl

    def handle(self, user_id: str, line_id: int, quantity: int) -> CartDTO:
        """Set a line's quantity; the hold is resized to match.

        A quantity above the cart's unexpired hold is checked against
        available stock, so growing can fail.  Shrinking can fail too once
        the hold has expired and other carts have taken the stock
        (InsufficientStockError); the line is left as it was.
        """
        new_quantity = Quantity(quantity)

        with self._uow as uow:
            cart = uow.carts.get_by_user_id(user_id)
            if cart is None:
                raise CartLineNotFoundError(f"Cart line #{line_id} not found")
            line = cart.get_line(line_id)

            svc = ReservationService(
                uow.products, uow.reservations, self._clock, self._reservation_ttl
            )
            svc.hold(line.product_id, cart.id, new_quantity.value)  # type: ignore[arg-type]

            cart.update_item(line_id, new_quantity.value)
            uow.carts.save(cart)
            dto = cart_to_dto(cart, uow.products)
            uow.commit()

        logger.info(
            "User %s set cart line #%s to %d", user_id, line_id, new_quantity.value
        )
        return dto
