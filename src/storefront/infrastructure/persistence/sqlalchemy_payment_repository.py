"""SQLAlchemy implementation of PaymentRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.domain.model.order import PaymentMethod
from storefront.domain.model.payment import Payment, PaymentStatus
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.payment_repository import PaymentRepository
from storefront.infrastructure.persistence.database import as_utc
from storefront.infrastructure.persistence.orm import PaymentRow


class SqlAlchemyPaymentRepository(PaymentRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, payment_id: int) -> Payment | None:
        row = self._session.get(PaymentRow, payment_id)
        return self._to_domain(row) if row is not None else None

    def get_by_order_id(self, order_id: int) -> Payment | None:
        row = (
            self._session.query(PaymentRow)
            .filter(PaymentRow.order_id == order_id)
            .first()
        )
        return self._to_domain(row) if row is not None else None

    def add(self, payment: Payment) -> None:
        row = PaymentRow(order_id=payment.order_id, created_at=payment.created_at)
        self._apply(row, payment)
        self._session.add(row)
        self._session.flush()
        payment.id = row.id

    def save(self, payment: Payment) -> None:
        row = self._session.get(PaymentRow, payment.id)
        self._apply(row, payment)
        self._session.flush()

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _apply(row: PaymentRow, payment: Payment) -> None:
        row.amount = payment.amount.amount
        row.refunded_amount = payment.refunded_amount.amount
        row.currency = payment.amount.currency
        row.status = payment.status.value
        row.payment_method = payment.method.value
        row.transaction_id = payment.transaction_id
        row.updated_at = payment.updated_at

    @staticmethod
    def _to_domain(row: PaymentRow) -> Payment:
        currency = row.currency or "USD"
        return Payment(
            id=row.id,
            order_id=row.order_id,
            amount=Money(Decimal(str(row.amount)), currency),
            status=PaymentStatus(row.status),
            method=PaymentMethod(row.payment_method),
            transaction_id=row.transaction_id,
            refunded_amount=Money(Decimal(str(row.refunded_amount or 0)), currency),
            created_at=as_utc(row.created_at),  # type: ignore[arg-type]
            updated_at=as_utc(row.updated_at),  # type: ignore[arg-type]
        )
