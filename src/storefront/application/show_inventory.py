"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.inventory_ledger import InventoryLedger


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    product_name: str
    price: str
    total: int
    reserved: int
    available: int


class ShowInventoryHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self) -> list[InventoryLineDTO]:
        now = self._clock()
        with self._uow as uow:
            ledger = InventoryLedger(uow.products, uow.reservations, self._clock)
            lines = []
            for product in uow.products.list_all():
                available = ledger.available_for(product, now)
                lines.append(
                    InventoryLineDTO(
                        product_id=product.id,
                        product_name=product.name,
                        price=str(product.price),
                        total=product.stock_quantity,
                        reserved=product.stock_quantity - available,
                        available=available,
                    )
                )
        return lines
