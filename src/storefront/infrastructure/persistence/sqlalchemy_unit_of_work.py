"""SQLAlchemy-backed Unit of Work: one Session, one transaction."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storefront.domain.exceptions import InternalError
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.infrastructure.persistence.sqlalchemy_cart_repository import (
    SqlAlchemyCartRepository,
)
from storefront.infrastructure.persistence.sqlalchemy_order_repository import (
    SqlAlchemyOrderRepository,
)
from storefront.infrastructure.persistence.sqlalchemy_payment_repository import (
    SqlAlchemyPaymentRepository,
)
from storefront.infrastructure.persistence.sqlalchemy_product_repository import (
    SqlAlchemyProductRepository,
)
from storefront.infrastructure.persistence.sqlalchemy_reservation_repository import (
    SqlAlchemyReservationRepository,
)

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.products = SqlAlchemyProductRepository(self._session)
        self.reservations = SqlAlchemyReservationRepository(self._session)
        self.carts = SqlAlchemyCartRepository(self._session)
        self.orders = SqlAlchemyOrderRepository(self._session)
        self.payments = SqlAlchemyPaymentRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._session.close()
            self._session = None

        if isinstance(exc, SQLAlchemyError):
            logger.error(
                "Storage failure, unit of work rolled back",
                exc_info=(exc_type, exc, tb),
            )
            raise InternalError(
                "Storage failure; the operation was rolled back and can be retried"
            ) from exc

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
