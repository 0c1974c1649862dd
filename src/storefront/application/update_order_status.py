"""Application service: Update Order Status use case.

Drives the order status state machine and fires the hooks attached to
particular edges:

- entering CANCELLED or REFUNDED puts every order line back into the
  ledger, in the same unit of work as the status write;
- entering DELIVERED for a cash-on-delivery order issues its payment
  after commit, unless one already exists.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.payment_effects import issue_payment
from storefront.domain.exceptions import OrderNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.model.order_status import (
    STOCK_RESTORING_STATUSES,
    OrderStatus,
    parse_status,
)
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


class UpdateOrderStatusHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        payment_gateway: PaymentGateway,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._payment_gateway = payment_gateway
        self._clock = clock

    def handle(self, order_id: int, target: OrderStatus | str) -> OrderDTO:
        """Move an order to ``target``.

        No-op when the order is already there.  Raises OrderNotFoundError
        or InvalidTransitionError.
        """
        if isinstance(target, str):
            target = parse_status(target)

        with self._uow as uow:
            order = uow.orders.get_by_id(order_id, for_update=True)
            if order is None:
                raise OrderNotFoundError(f"Order #{order_id} not found")

            previous = order.status
            changed = order.transition_to(target, self._clock())
            if changed:
                if target in STOCK_RESTORING_STATUSES:
                    ledger = InventoryLedger(uow.products, uow.reservations, self._clock)
                    ledger.restore_for_order(order)
                uow.orders.save(order)
                uow.commit()

        if changed:
            logger.info(
                "Order %s moved from %s to %s",
                order.order_number, previous.value, target.value,
            )
            self._after_commit(order)
        return order_to_dto(order)

    def _after_commit(self, order: Order) -> None:
        if order.status == OrderStatus.DELIVERED and order.payment_method.is_deferred:
            issue_payment(self._payment_gateway, order.id, order.payment_method)  # type: ignore[arg-type]
