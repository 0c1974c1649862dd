"""Application service: Reconcile Payments use case.

Repairs the one gap the order flow accepts: payment issuance runs after
the order commits, so a failed call leaves

- a prepaid (cc/dc) order PENDING without a payment, or
- a delivered cash-on-delivery order without a payment.

Meant to run periodically.  Safe to run any number of times.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.application.payment_effects import issue_payment
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import InvalidTransitionError
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.model.payment import PaymentStatus
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


class ReconcilePaymentsHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        payment_gateway: PaymentGateway,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._payment_gateway = payment_gateway
        self._clock = clock

    def handle(self) -> list[str]:
        """Return the numbers of the orders that were repaired."""
        with self._uow as uow:
            pending = uow.orders.list_by_status({OrderStatus.PENDING})
            delivered = uow.orders.list_by_status(
                {OrderStatus.DELIVERED, OrderStatus.COMPLETED}
            )

        repaired: list[str] = []

        for order in pending:
            if order.payment_method.is_deferred:
                continue
            payment = issue_payment(self._payment_gateway, order.id, order.payment_method)  # type: ignore[arg-type]
            if payment is None or payment.status != PaymentStatus.COMPLETED:
                continue
            status = UpdateOrderStatusHandler(self._uow, self._payment_gateway, self._clock)
            try:
                status.handle(order.id, OrderStatus.PROCESSING)  # type: ignore[arg-type]
            except InvalidTransitionError:
                logger.warning("Order %s could not move to processing", order.order_number)
                continue
            repaired.append(order.order_number)

        for order in delivered:
            if not order.payment_method.is_deferred:
                continue
            if self._payment_gateway.get_payment_by_order_id(order.id) is not None:  # type: ignore[arg-type]
                continue
            if issue_payment(self._payment_gateway, order.id, order.payment_method) is not None:  # type: ignore[arg-type]
                repaired.append(order.order_number)

        if repaired:
            logger.info("Reconciled payments for %d order(s): %s", len(repaired), repaired)
        return repaired
