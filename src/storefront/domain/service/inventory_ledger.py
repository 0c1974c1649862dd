"""Domain service: Inventory Ledger.

The ledger quantity on each product is the source of truth for stock.
"Available" stock is derived: the ledger quantity minus every unexpired
hold on the product.  All reads happen inside the caller's unit of work,
so they see the same snapshot as whatever write depends on them.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.domain.exceptions import InsufficientStockError, ProductNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.reservation_repository import (
    ReservationRepository,
)

logger = logging.getLogger(__name__)


class InventoryLedger:

    def __init__(
        self,
        product_repo: ProductRepository,
        reservation_repo: ReservationRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._product_repo = product_repo
        self._reservation_repo = reservation_repo
        self._clock = clock

    def adjust_stock(self, product_id: str, delta: int) -> int:
        """Add ``delta`` (negative to deduct) to the ledger quantity.

        Fails instead of clamping when the result would go negative.
        """
        try:
            new_quantity = self._product_repo.adjust_stock(product_id, delta)
        except InsufficientStockError:
            logger.info(
                "Stock adjustment of %+d refused for product %s", delta, product_id
            )
            raise
        logger.debug("Stock of product %s adjusted by %+d to %d", product_id, delta, new_quantity)
        return new_quantity

    def available_stock(
        self, product_id: str, excluding_cart_id: int | None = None
    ) -> int:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product not found: '{product_id}'")
        return self.available_for(product, self._clock(), excluding_cart_id)

    def available_for(
        self,
        product: Product,
        now: datetime,
        excluding_cart_id: int | None = None,
    ) -> int:
        """Available stock for an already-loaded (usually locked) product."""
        held = self._reservation_repo.reserved_quantity(
            product.id, now, excluding_cart_id=excluding_cart_id
        )
        return product.stock_quantity - held

    def restore_for_order(self, order: Order) -> None:
        """Put every line of an order back into the ledger."""
        for line in order.items:
            self.adjust_stock(line.product_id, line.quantity.value)
