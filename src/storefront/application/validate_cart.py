"""Application service: Validate Cart use case (query).

A line can go stale after it was added: its hold may have expired and
another cart taken the stock, or the stock count may have been lowered.
Each line is checked against available stock *excluding the cart's own
holds*, since those holds exist precisely for these lines.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from storefront.application.dto import CartValidationDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.cart import Cart
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.inventory_ledger import InventoryLedger


def find_cart_problems(
    cart: Cart,
    product_repo: ProductRepository,
    ledger: InventoryLedger,
    now: datetime,
) -> list[str]:
    """Return one message per line that no longer fits available stock."""
    problems: list[str] = []
    for line in cart.lines:
        product = product_repo.get_by_id(line.product_id)
        if product is None:
            problems.append(f"Product '{line.product_id}' is no longer available")
            continue
        available = ledger.available_for(product, now, excluding_cart_id=cart.id)
        if line.quantity.value > available:
            problems.append(
                f"Insufficient stock for {product.name}. "
                f"Requested: {line.quantity.value}, available: {max(available, 0)}"
            )
    return problems


class ValidateCartHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, cart_id: int) -> CartValidationDTO:
        with self._uow as uow:
            cart = uow.carts.get_by_id(cart_id)
            if cart is None:
                raise EntityNotFoundError(f"Cart #{cart_id} not found")
            ledger = InventoryLedger(uow.products, uow.reservations, self._clock)
            problems = find_cart_problems(cart, uow.products, ledger, self._clock())

        return CartValidationDTO(cart_id=cart_id, valid=not problems, problems=problems)
