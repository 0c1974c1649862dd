"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the callers (CLI, an HTTP layer) and the
application layer without exposing domain internals.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.cart import Cart
from storefront.domain.model.order import Order
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class CartLineDTO:

    id: int
    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    """Output: a cart as shown to its owner.  ``id`` is None when the
    user has no cart yet."""

    id: int | None
    user_id: str
    lines: list[CartLineDTO]
    total: str

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass(frozen=True)
class CartValidationDTO:

    cart_id: int
    valid: bool
    problems: list[str]


@dataclass(frozen=True)
class OrderLineItemDTO:

    product_id: str
    product_name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:

    id: int
    order_number: str
    user_id: str
    status: str
    payment_method: str
    items: list[OrderLineItemDTO]
    total: str
    shipping_address: dict[str, str]
    billing_address: dict[str, str]
    created_at: str
    updated_at: str


# --- Mapping ------------------------------------------------------------------


def empty_cart_dto(user_id: str) -> CartDTO:
    return CartDTO(id=None, user_id=user_id, lines=[], total=str(Money.zero()))


def cart_to_dto(cart: Cart, product_repo: ProductRepository) -> CartDTO:
    """Render a cart with the catalog's *current* prices."""
    lines: list[CartLineDTO] = []
    total = Money.zero()
    for line in cart.lines:
        product = product_repo.get_by_id(line.product_id)
        if product is None:
            unit_price = Money.zero()
            name = f"<unknown {line.product_id}>"
        else:
            unit_price = product.price
            name = product.name
        line_total = unit_price * line.quantity.value
        total = total + line_total
        lines.append(
            CartLineDTO(
                id=line.id,  # type: ignore[arg-type]
                product_id=line.product_id,
                product_name=name,
                quantity=line.quantity.value,
                unit_price=str(unit_price),
                line_total=str(line_total),
            )
        )
    return CartDTO(id=cart.id, user_id=cart.user_id, lines=lines, total=str(total))


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status.value,
        payment_method=order.payment_method.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        total=str(order.total),
        shipping_address=order.shipping_address.to_dict(),
        billing_address=order.billing_address.to_dict(),
        created_at=order.created_at.strftime(TIMESTAMP_FORMAT),
        updated_at=order.updated_at.strftime(TIMESTAMP_FORMAT),
    )
