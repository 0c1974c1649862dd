"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so callers (the CLI, an HTTP layer) can catch them uniformly and display
user-friendly messages.  Storage failures surface as InternalError and never
leak driver details.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ProductNotFoundError(EntityNotFoundError):
    pass


class CartLineNotFoundError(EntityNotFoundError):
    pass


class OrderNotFoundError(EntityNotFoundError):
    pass


class PaymentNotFoundError(EntityNotFoundError):
    pass


class InsufficientStockError(DomainException):
    """Not enough available stock.  Recoverable: retry with less, or wait
    for other carts' holds to expire."""

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(need {requested}, have {available} available)"
        )


class EmptyCartError(DomainException):
    """Order creation was attempted on a cart with no lines."""


class CartInvalidError(DomainException):
    """One or more cart lines no longer fit the available stock."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Cart validation failed: " + "; ".join(self.problems))


class InvalidTransitionError(DomainException):
    """The requested order status edge is not in the transition table."""


class NotCancellableError(DomainException):
    """The order is past the point where it can be cancelled."""


class UnauthorizedError(DomainException):
    """The calling user does not own the entity."""


class PaymentError(DomainException):
    """Raised by the payment collaborator."""


class PaymentAlreadyExistsError(PaymentError):
    pass


class AlreadyRefundedError(PaymentError):
    pass


class RefundAmountExceededError(PaymentError):
    pass


class OrderNumberConflictError(DomainException):
    """The generated order number is already taken."""


class InternalError(DomainException):
    """Storage or transport failure.  The failed operation was rolled back
    and is safe to retry as a whole."""
