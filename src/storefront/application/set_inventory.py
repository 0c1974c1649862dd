"""Application service: Set Inventory use case.

An admin stock count overwrites the ledger quantity.  It may not drop
below what carts currently hold, or available stock would go negative.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.domain.exceptions import ProductNotFoundError, ValidationError
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SetInventoryHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, product_id: str, quantity: int) -> None:
        """Set the total stock quantity for a product."""
        with self._uow as uow:
            product = uow.products.lock_for_update(product_id)
            if product is None:
                raise ProductNotFoundError(f"Product not found: '{product_id}'")

            held = uow.reservations.reserved_quantity(product_id, self._clock())
            if quantity < held:
                raise ValidationError(
                    f"Cannot set stock of {product.name} to {quantity}: "
                    f"{held} currently held by carts"
                )

            previous = product.stock_quantity
            product.set_stock(quantity)
            uow.products.save(product)
            uow.commit()

        logger.info("Stock of %s set from %d to %d", product.name, previous, quantity)
