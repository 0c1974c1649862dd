"""SQLAlchemy implementation of ReservationRepository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.domain.model.reservation import Reservation
from storefront.domain.repository.reservation_repository import (
    ReservationRepository,
)
from storefront.infrastructure.persistence.database import as_utc
from storefront.infrastructure.persistence.orm import ReservationRow


class SqlAlchemyReservationRepository(ReservationRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, product_id: str, cart_id: int) -> Reservation | None:
        row = self._find(product_id, cart_id)
        return self._to_domain(row) if row is not None else None

    def list_for_cart(self, cart_id: int) -> list[Reservation]:
        rows = (
            self._session.query(ReservationRow)
            .filter(ReservationRow.cart_id == cart_id)
            .order_by(ReservationRow.id)
            .all()
        )
        return [self._to_domain(row) for row in rows]

    def reserved_quantity(
        self,
        product_id: str,
        now: datetime,
        excluding_cart_id: int | None = None,
    ) -> int:
        q = self._session.query(
            func.coalesce(func.sum(ReservationRow.quantity), 0)
        ).filter(
            ReservationRow.product_id == product_id,
            ReservationRow.expires_at > now,
        )
        if excluding_cart_id is not None:
            q = q.filter(ReservationRow.cart_id != excluding_cart_id)
        return int(q.scalar() or 0)

    def upsert(self, reservation: Reservation) -> None:
        row = self._find(reservation.product_id, reservation.cart_id)
        if row is None:
            row = ReservationRow(
                product_id=reservation.product_id,
                cart_id=reservation.cart_id,
            )
            self._session.add(row)
        row.quantity = reservation.quantity
        row.expires_at = reservation.expires_at
        self._session.flush()

    def delete(self, product_id: str, cart_id: int) -> None:
        (
            self._session.query(ReservationRow)
            .filter(
                ReservationRow.product_id == product_id,
                ReservationRow.cart_id == cart_id,
            )
            .delete(synchronize_session="evaluate")
        )

    def delete_for_cart(self, cart_id: int) -> int:
        deleted = (
            self._session.query(ReservationRow)
            .filter(ReservationRow.cart_id == cart_id)
            .delete(synchronize_session="evaluate")
        )
        return int(deleted or 0)

    def delete_expired(self, now: datetime) -> int:
        deleted = (
            self._session.query(ReservationRow)
            .filter(ReservationRow.expires_at <= now)
            .delete(synchronize_session=False)
        )
        return int(deleted or 0)

    # --- Internal helpers -----------------------------------------------------

    def _find(self, product_id: str, cart_id: int) -> ReservationRow | None:
        return (
            self._session.query(ReservationRow)
            .filter(
                ReservationRow.product_id == product_id,
                ReservationRow.cart_id == cart_id,
            )
            .first()
        )

    @staticmethod
    def _to_domain(row: ReservationRow) -> Reservation:
        return Reservation(
            product_id=row.product_id,
            cart_id=row.cart_id,
            quantity=row.quantity,
            expires_at=as_utc(row.expires_at),  # type: ignore[arg-type]
        )
