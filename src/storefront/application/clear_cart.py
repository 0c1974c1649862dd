"""Application service: Clear Cart use case.

Releases every hold of the cart and deletes its lines together.
"""

from __future__ import annotations

import logging

from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.reservation_service import ReservationService

logger = logging.getLogger(__name__)


class ClearCartHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, user_id: str) -> None:
        with self._uow as uow:
            cart = uow.carts.get_by_user_id(user_id)
            if cart is None:
                return
            released = ReservationService(uow.products, uow.reservations).release_cart(
                cart.id  # type: ignore[arg-type]
            )
            cart.clear()
            uow.carts.save(cart)
            uow.commit()

        logger.info("Cleared cart #%s (%d hold(s) released)", cart.id, released)
