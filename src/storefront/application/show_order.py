"""Application service: Show Order use case (query)."""

from __future__ import annotations

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.domain.exceptions import OrderNotFoundError, UnauthorizedError
from storefront.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int, user_id: str | None = None) -> OrderDTO:
        """Return one order.  With ``user_id``, only the owner may see it."""
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order #{order_id} not found")
        if user_id is not None and order.user_id != user_id:
            raise UnauthorizedError("Unauthorized to view this order")
        return order_to_dto(order)


class ListOrdersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, user_id: str) -> list[OrderDTO]:
        with self._uow as uow:
            orders = uow.orders.list_for_user(user_id)
        return [order_to_dto(order) for order in orders]
