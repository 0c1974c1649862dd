"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.orm import sessionmaker

from storefront.infrastructure.config import Settings, get_settings
from storefront.infrastructure.payment.stored_payment_gateway import (
    StoredPaymentGateway,
)
from storefront.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
    init_db,
)
from storefront.infrastructure.persistence.sqlalchemy_unit_of_work import (
    SqlAlchemyUnitOfWork,
)


def settings() -> Settings:
    return get_settings()


@lru_cache()
def session_factory() -> sessionmaker:
    config = get_settings()
    engine = create_db_engine(config.database_url, echo=config.sql_echo)
    init_db(engine)
    return create_session_factory(engine)


def unit_of_work() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory())


def payment_gateway() -> StoredPaymentGateway:
    return StoredPaymentGateway(unit_of_work())
