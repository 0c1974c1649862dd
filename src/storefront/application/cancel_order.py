"""Application service: Cancel Order use case.

Only PENDING and PROCESSING orders can be cancelled.  Every line's
quantity goes back into the ledger in the same unit of work as the
status write.  The order row is locked while this runs, and a cancelled
order is terminal, so stock is never restored twice.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.domain.exceptions import (
    NotCancellableError,
    OrderNotFoundError,
    UnauthorizedError,
)
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, order_id: int, user_id: str) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id, for_update=True)
            if order is None:
                raise OrderNotFoundError(f"Order #{order_id} not found")
            if order.user_id != user_id:
                raise UnauthorizedError("Unauthorized to cancel this order")
            if not order.is_cancellable:
                raise NotCancellableError(
                    f"Order #{order_id} cannot be cancelled in {order.status.value} status"
                )

            ledger = InventoryLedger(uow.products, uow.reservations, self._clock)
            ledger.restore_for_order(order)
            order.transition_to(OrderStatus.CANCELLED, self._clock())
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s cancelled by user %s", order.order_number, user_id)
        return order_to_dto(order)
