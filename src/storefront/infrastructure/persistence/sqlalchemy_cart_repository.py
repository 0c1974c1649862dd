"""SQLAlchemy implementation of CartRepository."""

from __future__ import annotations

from sqlalchemy.orm import Session

from storefront.domain.model.cart import Cart, CartLine
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.cart_repository import CartRepository
from storefront.infrastructure.persistence.database import as_utc
from storefront.infrastructure.persistence.orm import CartLineRow, CartRow


class SqlAlchemyCartRepository(CartRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, cart_id: int) -> Cart | None:
        row = self._session.get(CartRow, cart_id)
        return self._to_domain(row) if row is not None else None

    def get_by_user_id(self, user_id: str) -> Cart | None:
        row = self._session.query(CartRow).filter(CartRow.user_id == user_id).first()
        return self._to_domain(row) if row is not None else None

    def save(self, cart: Cart) -> None:
        if cart.id is None:
            row = CartRow(
                user_id=cart.user_id,
                created_at=cart.created_at,
                updated_at=cart.updated_at,
            )
            self._session.add(row)
            self._session.flush()
            cart.id = row.id
        else:
            row = self._session.get(CartRow, cart.id)
            row.updated_at = cart.updated_at

        # Deletes go out first so a re-added product never trips the
        # (cart, product) unique constraint.
        kept = {line.id for line in cart.lines if line.id is not None}
        for line_row in list(row.lines):
            if line_row.id not in kept:
                row.lines.remove(line_row)
        self._session.flush()

        by_id = {line_row.id: line_row for line_row in row.lines}
        created: list[tuple[CartLine, CartLineRow]] = []
        for line in cart.lines:
            if line.id is None:
                line_row = CartLineRow(
                    product_id=line.product_id, quantity=line.quantity.value
                )
                row.lines.append(line_row)
                created.append((line, line_row))
            else:
                by_id[line.id].quantity = line.quantity.value
        self._session.flush()

        for line, line_row in created:
            line.id = line_row.id

    @staticmethod
    def _to_domain(row: CartRow) -> Cart:
        return Cart(
            id=row.id,
            user_id=row.user_id,
            lines=[
                CartLine(
                    id=line_row.id,
                    product_id=line_row.product_id,
                    quantity=Quantity(line_row.quantity),
                )
                for line_row in row.lines
            ],
            created_at=as_utc(row.created_at),  # type: ignore[arg-type]
            updated_at=as_utc(row.updated_at),  # type: ignore[arg-type]
        )
