"""Application service: Ensure Cart use case.

Carts are created explicitly and idempotently here, never as a hidden
side effect of reading one.
"""

from __future__ import annotations

import logging

from storefront.application.dto import CartDTO, cart_to_dto
from storefront.domain.model.cart import Cart
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def ensure_cart(cart_repo: CartRepository, user_id: str) -> Cart:
    """Return the user's cart, creating it on first use."""
    cart = cart_repo.get_by_user_id(user_id)
    if cart is None:
        cart = Cart.open_for(user_id)
        cart_repo.save(cart)
        logger.info("Opened cart #%s for user %s", cart.id, user_id)
    return cart


class EnsureCartHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, user_id: str) -> CartDTO:
        with self._uow as uow:
            cart = ensure_cart(uow.carts, user_id)
            dto = cart_to_dto(cart, uow.products)
            uow.commit()
        return dto
