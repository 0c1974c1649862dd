"""Order status lifecycle as an explicit finite-state machine.

``TRANSITIONS`` maps every status to the set of statuses it may move to.
Nothing else in the codebase decides whether an edge is legal, so the
table can be checked on its own, away from any storage concerns.
"""

from __future__ import annotations

from enum import Enum

from storefront.domain.exceptions import InvalidTransitionError


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    RETURN_REQUESTED = "return_requested"


TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.COMPLETED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED, OrderStatus.RETURN_REQUESTED}),
    # Only the return flow leaves COMPLETED.
    OrderStatus.COMPLETED: frozenset({OrderStatus.RETURN_REQUESTED}),
    # DELIVERED again when a return is rejected.
    OrderStatus.RETURN_REQUESTED: frozenset({OrderStatus.REFUNDED, OrderStatus.DELIVERED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

TERMINAL_STATUSES = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
})

CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})

# Entering one of these puts every order line back into the ledger.
STOCK_RESTORING_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})


def allowed_targets(current: OrderStatus) -> frozenset[OrderStatus]:
    return TRANSITIONS.get(current, frozenset())


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in allowed_targets(current)


def assert_transition(current: OrderStatus, target: OrderStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Invalid status transition from {current.value} to {target.value}"
        )


def parse_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus(raw.strip().lower())
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise InvalidTransitionError(
            f"Unknown order status '{raw}' (expected one of: {valid})"
        ) from None
