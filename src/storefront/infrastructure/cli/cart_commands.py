"""CLI commands for the Cart aggregate.

``--user`` stands in for the authenticated user id an HTTP layer would
supply; it is trusted as given.
"""

from __future__ import annotations

import click

from storefront.application.add_to_cart import AddToCartHandler
from storefront.application.clear_cart import ClearCartHandler
from storefront.application.dto import CartDTO
from storefront.application.remove_cart_line import RemoveCartLineHandler
from storefront.application.show_cart import ShowCartHandler
from storefront.application.update_cart_line import UpdateCartLineHandler
from storefront.application.validate_cart import ValidateCartHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import settings, unit_of_work


def _display_cart(dto: CartDTO) -> None:
    """Shared formatting for displaying a cart."""
    if not dto.lines:
        click.echo(f"Cart of {dto.user_id} is empty.")
        return

    click.echo(f"Cart #{dto.id}  (user={dto.user_id})")
    click.echo()
    click.echo(f"  {'Line':<6} {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*54}")
    for line in dto.lines:
        click.echo(
            f"  {line.id:<6} {line.product_name:<20} {line.quantity:>5} "
            f"{line.unit_price:>10} {line.line_total:>10}"
        )
    click.echo(f"  {'-'*54}")
    click.echo(f"  {'Cart Total':<34} {dto.total:>19}")


@click.command("add")
@click.option("--user", "user_id", required=True, help="User ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", default=1, show_default=True, type=int, help="Quantity to add.")
def cart_add(user_id: str, product_id: str, quantity: int) -> None:
    """Add a product to the cart (reserves stock)."""
    handler = AddToCartHandler(
        uow=unit_of_work(), reservation_ttl=settings().reservation_ttl
    )

    try:
        dto = handler.handle(user_id=user_id, product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("update")
@click.option("--user", "user_id", required=True, help="User ID.")
@click.option("--line", "line_id", required=True, type=int, help="Cart line ID.")
@click.option("--quantity", required=True, type=int, help="New quantity.")
def cart_update(user_id: str, line_id: int, quantity: int) -> None:
    """Change the quantity of a cart line."""
    handler = UpdateCartLineHandler(
        uow=unit_of_work(), reservation_ttl=settings().reservation_ttl
    )

    try:
        dto = handler.handle(user_id=user_id, line_id=line_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("remove")
@click.option("--user", "user_id", required=True, help="User ID.")
@click.option("--line", "line_id", required=True, type=int, help="Cart line ID.")
def cart_remove(user_id: str, line_id: int) -> None:
    """Remove a line from the cart (releases its stock)."""
    handler = RemoveCartLineHandler(uow=unit_of_work())

    try:
        dto = handler.handle(user_id=user_id, line_id=line_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("clear")
@click.option("--user", "user_id", required=True, help="User ID.")
def cart_clear(user_id: str) -> None:
    """Empty the cart and release every hold."""
    try:
        ClearCartHandler(uow=unit_of_work()).handle(user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart of {user_id} cleared.")


@click.command("show")
@click.option("--user", "user_id", required=True, help="User ID.")
def cart_show(user_id: str) -> None:
    """Show the user's cart."""
    try:
        dto = ShowCartHandler(uow=unit_of_work()).handle(user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("validate")
@click.option("--cart", "cart_id", required=True, type=int, help="Cart ID.")
def cart_validate(cart_id: int) -> None:
    """Check every cart line against available stock."""
    try:
        result = ValidateCartHandler(uow=unit_of_work()).handle(cart_id=cart_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if result.valid:
        click.echo(f"Cart #{cart_id} is valid.")
        return
    click.echo(f"Cart #{cart_id} has problems:")
    for problem in result.problems:
        click.echo(f"  - {problem}")
