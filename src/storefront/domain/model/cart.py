"""Cart aggregate: a user's mutable list of (product, quantity) lines.

The cart itself knows nothing about stock.  Application handlers change
the matching reservation first and only then touch the cart, inside the
same unit of work, so a line never exists without its hold.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from storefront.domain.exceptions import CartLineNotFoundError
from storefront.domain.model.value_objects import Quantity, utc_now


@dataclass
class CartLine:
    """One product in a cart.  ``id`` is assigned by the repository."""

    product_id: str
    quantity: Quantity
    id: int | None = None


@dataclass
class Cart:
    """Aggregate root for a user's cart (one per user)."""

    id: int | None
    user_id: str
    lines: list[CartLine] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @staticmethod
    def open_for(user_id: str) -> Cart:
        return Cart(id=None, user_id=user_id)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find_line(self, line_id: int) -> CartLine | None:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    def line_for_product(self, product_id: str) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def get_line(self, line_id: int) -> CartLine:
        line = self.find_line(line_id)
        if line is None:
            raise CartLineNotFoundError(f"Cart line #{line_id} not found")
        return line

    # --- Mutations ------------------------------------------------------------

    def add_item(self, product_id: str, quantity: int) -> CartLine:
        """Add a product, merging with an existing line for it.

        Returns the resulting line so the caller can size the hold.
        """
        added = Quantity(quantity)
        line = self.line_for_product(product_id)
        if line is None:
            line = CartLine(product_id=product_id, quantity=added)
            self.lines.append(line)
        else:
            line.quantity = Quantity(line.quantity.value + added.value)
        self._touch()
        return line

    def update_item(self, line_id: int, quantity: int) -> CartLine:
        line = self.get_line(line_id)
        line.quantity = Quantity(quantity)
        self._touch()
        return line

    def remove_item(self, line_id: int) -> CartLine | None:
        line = self.find_line(line_id)
        if line is not None:
            self.lines.remove(line)
            self._touch()
        return line

    def clear(self) -> None:
        self.lines = []
        self._touch()

    def _touch(self) -> None:
        self.updated_at = utc_now()
