"""Order aggregate: the immutable record of a checkout.

The Order owns its line items, whose prices were snapshotted when the
order was created.  Status changes go exclusively through
``transition_to``, which consults the transition table.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order_status import (
    CANCELLABLE_STATUSES,
    TERMINAL_STATUSES,
    OrderStatus,
    assert_transition,
)
from storefront.domain.model.value_objects import Address, Money, Quantity, utc_now


class PaymentMethod(Enum):
    CREDIT_CARD = "cc"
    DEBIT_CARD = "dc"
    CASH_ON_DELIVERY = "cod"

    @property
    def is_deferred(self) -> bool:
        """Deferred methods get their payment on delivery, not at checkout."""
        return self is PaymentMethod.CASH_ON_DELIVERY

    @staticmethod
    def parse(raw: str) -> PaymentMethod:
        try:
            return PaymentMethod(raw.strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unsupported payment method '{raw}' (expected cc, dc or cod)"
            ) from None


def generate_order_number(now: datetime | None = None) -> str:
    """Time-based prefix plus a random suffix, e.g. ``ORD-1760745600-1f3a9c2e``.

    Collisions are improbable, not impossible; the store's unique
    constraint on the order number is the real guarantee.
    """
    moment = now or utc_now()
    return f"ORD-{int(moment.timestamp())}-{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the price of a product at order-creation time."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Order:
    """Aggregate root for placed orders.

    Use the ``Order.create()`` factory for new orders.  The ``__init__``
    is intentionally simple so the repository can reconstitute persisted
    orders without re-validating.
    """

    id: int | None
    user_id: str
    order_number: str
    items: list[OrderLineItem]
    payment_method: PaymentMethod
    shipping_address: Address
    billing_address: Address
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @staticmethod
    def create(
        user_id: str,
        items: list[OrderLineItem],
        payment_method: PaymentMethod,
        shipping_address: Address,
        billing_address: Address,
        order_number: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        if not user_id or not str(user_id).strip():
            raise ValidationError("User id is required")
        if not items:
            raise ValidationError("Order must contain at least one item")

        now = now or utc_now()
        return Order(
            id=None,
            user_id=str(user_id),
            order_number=order_number or generate_order_number(now),
            items=list(items),
            payment_method=payment_method,
            shipping_address=shipping_address,
            billing_address=billing_address,
            created_at=now,
            updated_at=now,
        )

    # --- State transitions ----------------------------------------------------

    def transition_to(self, target: OrderStatus, now: datetime | None = None) -> bool:
        """Move to ``target``.  Returns False when already there (no-op).

        Raises InvalidTransitionError for an edge missing from the table.
        Side effects (stock restoration, payments) are coordinated by the
        application handlers, not here.
        """
        if target == self.status:
            return False
        assert_transition(self.status, target)
        self.status = target
        self.updated_at = now or utc_now()
        return True

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
