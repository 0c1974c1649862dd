"""Application service: Purge Expired Reservations use case.

Housekeeping only.  Availability reads already ignore expired holds.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.reservation_service import ReservationService


class PurgeExpiredReservationsHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self) -> int:
        with self._uow as uow:
            purged = ReservationService(uow.products, uow.reservations, self._clock).purge_expired()
            uow.commit()
        return purged
