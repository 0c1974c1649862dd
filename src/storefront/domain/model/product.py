"""Product aggregate.

Products live independently of carts and orders.  The catalog itself is
managed elsewhere; this core only reads prices and moves the stock
quantity through the inventory ledger.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog together with its ledger quantity.

    Invariant: ``stock_quantity`` is never negative.
    """

    id: str
    name: str
    price: Money
    stock_quantity: int = 0

    def __post_init__(self) -> None:
        if self.stock_quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")

    def set_stock(self, quantity: int) -> None:
        """Overwrite the ledger quantity (admin stock count)."""
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        self.stock_quantity = quantity
