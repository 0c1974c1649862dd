"""Application service: Show Cart use case (query)."""

from __future__ import annotations

from storefront.application.dto import CartDTO, cart_to_dto, empty_cart_dto
from storefront.domain.repository.unit_of_work import UnitOfWork


class ShowCartHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, user_id: str) -> CartDTO:
        """Return the user's cart.  Does not create one."""
        with self._uow as uow:
            cart = uow.carts.get_by_user_id(user_id)
            if cart is None:
                return empty_cart_dto(user_id)
            return cart_to_dto(cart, uow.products)
