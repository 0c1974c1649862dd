"""Application service: Remove Cart Line use case."""

from __future__ import annotations

from storefront.application.dto import CartDTO, cart_to_dto, empty_cart_dto
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.reservation_service import ReservationService


class RemoveCartLineHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, user_id: str, line_id: int) -> CartDTO:
        """Drop a line and its hold.  An unknown line id changes nothing."""
        with self._uow as uow:
            cart = uow.carts.get_by_user_id(user_id)
            if cart is None:
                return empty_cart_dto(user_id)

            line = cart.find_line(line_id)
            if line is not None:
                ReservationService(uow.products, uow.reservations).release(
                    line.product_id, cart.id  # type: ignore[arg-type]
                )
                cart.remove_item(line_id)
                uow.carts.save(cart)

            dto = cart_to_dto(cart, uow.products)
            uow.commit()
        return dto
