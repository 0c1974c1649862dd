"""Reservation: a temporary, expiring hold against a product's stock.

One hold exists per (product, cart).  A hold stops counting against
available stock as soon as ``expires_at`` passes, whether or not the row
has been physically deleted yet.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from storefront.domain.exceptions import ValidationError

DEFAULT_RESERVATION_TTL = timedelta(minutes=10)


@dataclass
class Reservation:

    product_id: str
    cart_id: int
    quantity: int
    expires_at: datetime

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > now

    def active_quantity(self, now: datetime) -> int:
        return self.quantity if self.is_active(now) else 0

    def refresh(self, quantity: int, expires_at: datetime) -> None:
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        self.quantity = quantity
        self.expires_at = expires_at
