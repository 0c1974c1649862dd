"""Payment record owned by the payment collaborator.

The core only reads it back (to stay idempotent) and asks the
collaborator to create or refund it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from storefront.domain.exceptions import (
    AlreadyRefundedError,
    PaymentError,
    RefundAmountExceededError,
    ValidationError,
)
from storefront.domain.model.order import PaymentMethod
from storefront.domain.model.value_objects import Money, utc_now


class PaymentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


def generate_transaction_id() -> str:
    return "TXN-" + uuid.uuid4().hex[:8]


@dataclass
class Payment:

    id: int | None
    order_id: int
    amount: Money
    status: PaymentStatus
    method: PaymentMethod
    transaction_id: str = field(default_factory=generate_transaction_id)
    refunded_amount: Money = field(default_factory=Money.zero)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def refund(self, amount: Money) -> None:
        """Refund up to the paid amount; a payment is refunded once."""
        if self.status == PaymentStatus.REFUNDED:
            raise AlreadyRefundedError(f"Payment #{self.id} is already refunded")
        if self.status != PaymentStatus.COMPLETED:
            raise PaymentError(
                f"Can only refund completed payments (payment #{self.id} is {self.status.value})"
            )
        if amount.amount <= 0:
            raise ValidationError("Refund amount must be positive")
        if amount > self.amount:
            raise RefundAmountExceededError(
                f"Refund amount {amount} exceeds payment amount {self.amount}"
            )
        self.refunded_amount = amount
        self.status = PaymentStatus.REFUNDED
        self.updated_at = utc_now()
