"""Application service: Refund Order use case.

Called back by the returns workflow once a return is approved.  The
payment is refunded first; only then does the order move to REFUNDED,
which restores its stock.

The two steps cannot share a unit of work, so the handler is written to
be re-run: a payment that is already refunded counts as done and the
retry goes straight to the status write.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import InvalidTransitionError, OrderNotFoundError
from storefront.domain.model.order_status import OrderStatus, assert_transition
from storefront.domain.model.payment import PaymentStatus
from storefront.domain.model.value_objects import Money, utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


class RefundOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        payment_gateway: PaymentGateway,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._payment_gateway = payment_gateway
        self._clock = clock

    def handle(
        self, order_id: int, amount: str | Decimal | None = None
    ) -> OrderDTO:
        """Refund ``amount`` (default: the order total) and mark the order
        REFUNDED.

        Raises InvalidTransitionError unless the order is RETURN_REQUESTED,
        and RefundAmountExceededError / PaymentError from the payment
        collaborator.  An order that is already REFUNDED is returned as is.
        """
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(f"Order #{order_id} not found")
            if order.status == OrderStatus.REFUNDED:
                return order_to_dto(order)
            assert_transition(order.status, OrderStatus.REFUNDED)
            refund = Money.of(amount) if amount is not None else order.total

        payment = self._payment_gateway.get_payment_by_order_id(order_id)
        if payment is not None and payment.status == PaymentStatus.REFUNDED:
            logger.info(
                "Payment for order #%s already refunded, finishing the order", order_id
            )
        elif payment is not None:
            self._payment_gateway.process_refund(payment.id, refund.amount)  # type: ignore[arg-type]

        # Locks the order row and re-checks the edge before writing.
        status = UpdateOrderStatusHandler(self._uow, self._payment_gateway, self._clock)
        try:
            return status.handle(order_id, OrderStatus.REFUNDED)
        except InvalidTransitionError:
            logger.error(
                "Order #%s left return_requested before the refund was recorded; "
                "its payment is refunded",
                order_id,
            )
            raise
