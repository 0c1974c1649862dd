"""Post-commit payment side effects.

These run *after* the order's unit of work has committed, so they are not
covered by its atomicity.  A failure is logged and swallowed: the order
stays as committed, and ``ReconcilePaymentsHandler`` issues the missing
payment later.
"""

from __future__ import annotations

import logging

from storefront.domain.model.order import PaymentMethod
from storefront.domain.model.payment import Payment, PaymentStatus
from storefront.domain.service.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


def issue_payment(
    gateway: PaymentGateway, order_id: int, method: PaymentMethod
) -> Payment | None:
    """Ensure the order has a completed payment.

    Idempotent: an existing payment is returned untouched.  Returns None
    when the collaborator failed.
    """
    try:
        existing = gateway.get_payment_by_order_id(order_id)
        if existing is not None:
            return existing
        payment = gateway.create_payment_for_order(
            order_id, method, PaymentStatus.COMPLETED
        )
    except Exception:
        logger.exception(
            "Payment issuance failed for order #%s; left for reconciliation",
            order_id,
        )
        return None

    logger.info(
        "Issued %s payment %s of %s for order #%s",
        method.value, payment.transaction_id, payment.amount, order_id,
    )
    return payment
