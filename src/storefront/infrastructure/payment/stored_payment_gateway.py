"""Payment collaborator backed by the local ``payments`` table.

Stands in for a real gateway: it records the payment at the order's
total with whatever status the caller asks for, and performs refunds as
plain state changes.  Each call is its own unit of work.
"""

from __future__ import annotations

from decimal import Decimal

from storefront.domain.exceptions import (
    OrderNotFoundError,
    PaymentAlreadyExistsError,
    PaymentNotFoundError,
)
from storefront.domain.model.order import PaymentMethod
from storefront.domain.model.payment import Payment, PaymentStatus
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.payment_gateway import PaymentGateway


class StoredPaymentGateway(PaymentGateway):

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def create_payment_for_order(
        self, order_id: int, method: PaymentMethod, status: PaymentStatus
    ) -> Payment:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(f"Order #{order_id} not found")
            if uow.payments.get_by_order_id(order_id) is not None:
                raise PaymentAlreadyExistsError(
                    f"Payment already exists for order #{order_id}"
                )

            payment = Payment(
                id=None,
                order_id=order_id,
                amount=order.total,
                status=status,
                method=method,
            )
            uow.payments.add(payment)
            uow.commit()
        return payment

    def get_payment_by_order_id(self, order_id: int) -> Payment | None:
        with self._uow as uow:
            return uow.payments.get_by_order_id(order_id)

    def process_refund(self, payment_id: int, amount: Decimal) -> Payment:
        with self._uow as uow:
            payment = uow.payments.get_by_id(payment_id)
            if payment is None:
                raise PaymentNotFoundError(f"Payment #{payment_id} not found")
            payment.refund(Money(Decimal(str(amount)), payment.amount.currency))
            uow.payments.save(payment)
            uow.commit()
        return payment
