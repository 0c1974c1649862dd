"""SQLAlchemy implementation of OrderRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.domain.exceptions import OrderNumberConflictError
from storefront.domain.model.order import Order, OrderLineItem, PaymentMethod
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.model.value_objects import Address, Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.persistence.database import as_utc
from storefront.infrastructure.persistence.orm import OrderItemRow, OrderRow


class SqlAlchemyOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int, for_update: bool = False) -> Order | None:
        query = self._session.query(OrderRow).filter(OrderRow.id == order_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        row = query.first()
        return self._to_domain(row) if row is not None else None

    def get_by_order_number(self, order_number: str) -> Order | None:
        row = (
            self._session.query(OrderRow)
            .filter(OrderRow.order_number == order_number)
            .first()
        )
        return self._to_domain(row) if row is not None else None

    def list_for_user(self, user_id: str) -> list[Order]:
        rows = (
            self._session.query(OrderRow)
            .filter(OrderRow.user_id == user_id)
            .order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
            .all()
        )
        return [self._to_domain(row) for row in rows]

    def list_by_status(self, statuses: set[OrderStatus]) -> list[Order]:
        rows = (
            self._session.query(OrderRow)
            .filter(OrderRow.status.in_([s.value for s in statuses]))
            .order_by(OrderRow.id)
            .all()
        )
        return [self._to_domain(row) for row in rows]

    def add(self, order: Order) -> None:
        row = self._to_row(order)
        try:
            # Savepoint: a duplicate order number must not poison the
            # surrounding transaction (stock is already deducted in it).
            with self._session.begin_nested():
                self._session.add(row)
                self._session.flush()
        except IntegrityError:
            taken = (
                self._session.query(OrderRow.id)
                .filter(OrderRow.order_number == order.order_number)
                .first()
            )
            if taken is not None:
                raise OrderNumberConflictError(
                    f"Order number {order.order_number} is already in use"
                ) from None
            raise
        order.id = row.id

    def save(self, order: Order) -> None:
        row = self._session.get(OrderRow, order.id)
        row.status = order.status.value
        row.updated_at = order.updated_at
        self._session.flush()

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderRow:
        total = order.total
        return OrderRow(
            user_id=order.user_id,
            order_number=order.order_number,
            total_amount=total.amount,
            currency=total.currency,
            status=order.status.value,
            payment_method=order.payment_method.value,
            shipping_address=order.shipping_address.to_dict(),
            billing_address=order.billing_address.to_dict(),
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemRow(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity.value,
                    price_at_time=item.unit_price.amount,
                    currency=item.unit_price.currency,
                )
                for item in order.items
            ],
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        items = [
            OrderLineItem(
                product_id=i.product_id,
                product_name=i.product_name,
                quantity=Quantity(i.quantity),
                unit_price=Money(Decimal(str(i.price_at_time)), i.currency or "USD"),
            )
            for i in row.items
        ]
        return Order(
            id=row.id,
            user_id=row.user_id,
            order_number=row.order_number,
            items=items,
            payment_method=PaymentMethod(row.payment_method),
            shipping_address=Address.from_dict(row.shipping_address),
            billing_address=Address.from_dict(row.billing_address),
            status=OrderStatus(row.status),
            created_at=as_utc(row.created_at),  # type: ignore[arg-type]
            updated_at=as_utc(row.updated_at),  # type: ignore[arg-type]
        )
