"""Application service: Create Order use case.

Turns the user's cart into an order.  Everything from the stock
deduction to clearing the cart happens inside one unit of work: either
the order exists, the ledger is deducted and the cart is empty, or none
of it happened.

Payment for prepaid methods is issued after commit and is therefore
best-effort; see ``payment_effects``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.payment_effects import issue_payment
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.application.validate_cart import find_cart_problems
from storefront.domain.exceptions import (
    CartInvalidError,
    EmptyCartError,
    InternalError,
    InvalidTransitionError,
    OrderNumberConflictError,
    ProductNotFoundError,
)
from storefront.domain.model.order import (
    Order,
    OrderLineItem,
    PaymentMethod,
    generate_order_number,
)
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.model.payment import PaymentStatus
from storefront.domain.model.value_objects import Address, utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.payment_gateway import PaymentGateway
from storefront.domain.service.reservation_service import ReservationService

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 3


class CreateOrderHandler:

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
        self,
        user_id: str,
        shipping_address: Address,
        billing_address: Address,
        payment_method: PaymentMethod | str,
    ) -> OrderDTO:
        """Create an order from the user's cart.

        Steps:
        1. Load the cart; it must have lines.
        2. Re-check every line against available stock.
        3. Deduct each line from the ledger and snapshot its price.
        4. Persist the order as PENDING under a unique order number.
        5. Release the cart's holds and empty it.
        6. Commit, then (prepaid only) issue the payment and move the
           order to PROCESSING.

        Raises EmptyCartError, CartInvalidError or InsufficientStockError,
        with nothing changed.
        """
        if isinstance(payment_method, str):
            payment_method = PaymentMethod.parse(payment_method)

        with self._uow as uow:
            cart = uow.carts.get_by_user_id(user_id)
            if cart is None or cart.is_empty:
                raise EmptyCartError("Cart is empty")

            # The re-check and the deductions below must see the same holds,
            # so every product stays locked until commit.  Sorted to keep the
            # lock order the same for every writer.
            for product_id in sorted({line.product_id for line in cart.lines}):
                uow.products.lock_for_update(product_id)

            now = self._clock()
            ledger = InventoryLedger(uow.products, uow.reservations, self._clock)
            problems = find_cart_problems(cart, uow.products, ledger, now)
            if problems:
                logger.info("Order refused for user %s: %s", user_id, problems)
                raise CartInvalidError(problems)

            items: list[OrderLineItem] = []
            for line in cart.lines:
                product = uow.products.get_by_id(line.product_id)
                if product is None:
                    raise ProductNotFoundError(f"Product not found: '{line.product_id}'")
                ledger.adjust_stock(product.id, -line.quantity.value)
                items.append(
                    OrderLineItem(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=line.quantity,
                        unit_price=product.price,  # <-- price snapshot
                    )
                )

            order = Order.create(
                user_id=user_id,
                items=items,
                payment_method=payment_method,
                shipping_address=shipping_address,
                billing_address=billing_address,
                now=now,
            )
            self._add_with_unique_number(uow, order)

            ReservationService(uow.products, uow.reservations, self._clock).release_cart(
                cart.id  # type: ignore[arg-type]
            )
            cart.clear()
            uow.carts.save(cart)
            uow.commit()

        logger.info(
            "Order %s created for user %s: %d line(s), total %s, %s",
            order.order_number, user_id, len(order.items), order.total,
            payment_method.value,
        )

        if not payment_method.is_deferred:
            return self._settle_prepaid(order)
        return order_to_dto(order)

    # --- Internal helpers -----------------------------------------------------

    def _add_with_unique_number(self, uow: UnitOfWork, order: Order) -> None:
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            try:
                uow.orders.add(order)
                return
            except OrderNumberConflictError:
                logger.warning("Order number %s already taken, regenerating", order.order_number)
                order.order_number = generate_order_number(self._clock())
        raise InternalError("Could not allocate a unique order number")

    def _settle_prepaid(self, order: Order) -> OrderDTO:
        # The order is committed; from here on failures leave it PENDING for
        # reconciliation instead of reaching the caller.
        payment = issue_payment(self._payment_gateway, order.id, order.payment_method)  # type: ignore[arg-type]
        if payment is None or payment.status != PaymentStatus.COMPLETED:
            return order_to_dto(order)

        status = UpdateOrderStatusHandler(self._uow, self._payment_gateway, self._clock)
        try:
            return status.handle(order.id, OrderStatus.PROCESSING)  # type: ignore[arg-type]
        except InvalidTransitionError:
            # The order moved on (e.g. cancelled) between commit and payment.
            logger.warning(
                "Order %s paid but could not move to processing", order.order_number
            )
            return order_to_dto(order)
        except InternalError:
            logger.exception(
                "Order %s paid but the move to processing failed; left pending",
                order.order_number,
            )
            return order_to_dto(order)
