"""Port for the payment collaborator.

The core never implements payment logic.  It asks the collaborator to
create a payment (at checkout for prepaid methods, on delivery for cash on
delivery), reads it back to stay idempotent, and asks for refunds when a
return is approved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from storefront.domain.model.order import PaymentMethod
from storefront.domain.model.payment import Payment, PaymentStatus


class PaymentGateway(ABC):

    @abstractmethod
    def create_payment_for_order(
        self, order_id: int, method: PaymentMethod, status: PaymentStatus
    ) -> Payment:
        """Create the order's payment for its full total.

        Raises PaymentAlreadyExistsError if the order already has one.
        """

    @abstractmethod
    def get_payment_by_order_id(self, order_id: int) -> Payment | None:
        """Return the order's payment, or None."""

    @abstractmethod
    def process_refund(self, payment_id: int, amount: Decimal) -> Payment:
        """Refund a completed payment.

        Raises AlreadyRefundedError or RefundAmountExceededError.
        """
