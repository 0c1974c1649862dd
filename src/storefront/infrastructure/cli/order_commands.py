"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.create_order import CreateOrderHandler
from storefront.application.dto import OrderDTO
from storefront.application.refund_order import RefundOrderHandler
from storefront.application.show_order import ListOrdersHandler, ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import CartInvalidError, DomainException
from storefront.domain.model.value_objects import Address
from storefront.infrastructure.bootstrap import payment_gateway, unit_of_work

ADDRESS_HELP = (
    "Address as 'key=value' pairs separated by ';' "
    "(full_name, street, city, postal_code, country; state and phone optional)."
)


def _parse_address(raw: str) -> Address:
    """Parse 'full_name=Jane Doe;street=1 Main St;...' into an Address."""
    fields: dict[str, str] = {}
    for pair in raw.split(";"):
        pair = pair.strip()
        if not pair:
            continue
        key, sep, value = pair.partition("=")
        if not sep:
            raise click.BadParameter(f"Invalid address field '{pair}'. Expected key=value")
        fields[key.strip()] = value.strip()
    try:
        return Address.from_dict(fields)
    except DomainException as exc:
        raise click.BadParameter(str(exc))


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  {dto.order_number}")
    click.echo(f"  User:     {dto.user_id}")
    click.echo(f"  Status:   {dto.status.upper()}")
    click.echo(f"  Payment:  {dto.payment_method}")
    click.echo(f"  Created:  {dto.created_at}")
    click.echo(f"  Updated:  {dto.updated_at}")
    ship = dto.shipping_address
    click.echo(f"  Ship to:  {ship['full_name']}, {ship['street']}, {ship['city']} {ship['postal_code']}, {ship['country']}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*48}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*48}")
    click.echo(f"  {'Order Total':<37} {dto.total:>10}")


@click.command("create")
@click.option("--user", "user_id", required=True, help="User ID.")
@click.option(
    "--payment-method",
    required=True,
    type=click.Choice(["cc", "dc", "cod"], case_sensitive=False),
    help="cc, dc or cod.",
)
@click.option("--ship", "shipping", required=True, help=f"Shipping address. {ADDRESS_HELP}")
@click.option("--bill", "billing", default=None, help="Billing address (defaults to shipping).")
def order_create(user_id: str, payment_method: str, shipping: str, billing: str | None) -> None:
    """Place an order from the user's cart."""
    shipping_address = _parse_address(shipping)
    billing_address = _parse_address(billing) if billing else shipping_address

    handler = CreateOrderHandler(uow=unit_of_work(), payment_gateway=payment_gateway())

    try:
        dto = handler.handle(
            user_id=user_id,
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_method=payment_method,
        )
    except CartInvalidError as exc:
        for problem in exc.problems:
            click.echo(f"  - {problem}", err=True)
        raise click.ClickException("Cart validation failed")
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} {dto.order_number} placed.")
    click.echo()
    _display_order(dto)


@click.command("show")
@click.argument("order_id", type=int)
@click.option("--user", "user_id", default=None, help="Only show the order if it belongs to this user.")
def order_show(order_id: int, user_id: str | None) -> None:
    """Show details of an order."""
    try:
        dto = ShowOrderHandler(uow=unit_of_work()).handle(order_id=order_id, user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--user", "user_id", required=True, help="User ID.")
def order_list(user_id: str) -> None:
    """List a user's orders, newest first."""
    try:
        orders = ListOrdersHandler(uow=unit_of_work()).handle(user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo(f"No orders for {user_id}.")
        return

    click.echo(f"{'ID':<6} {'Number':<28} {'Status':<18} {'Total':>10}")
    click.echo("-" * 65)
    for dto in orders:
        click.echo(f"{dto.id:<6} {dto.order_number:<28} {dto.status:<18} {dto.total:>10}")


@click.command("status")
@click.argument("order_id", type=int)
@click.argument("target")
def order_status(order_id: int, target: str) -> None:
    """Move an order to a new status (administrative)."""
    handler = UpdateOrderStatusHandler(uow=unit_of_work(), payment_gateway=payment_gateway())

    try:
        dto = handler.handle(order_id=order_id, target=target)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} is now {dto.status.upper()}")


@click.command("cancel")
@click.argument("order_id", type=int)
@click.option("--user", "user_id", required=True, help="User ID of the order owner.")
def order_cancel(order_id: int, user_id: str) -> None:
    """Cancel a pending or processing order (restores stock)."""
    try:
        dto = CancelOrderHandler(uow=unit_of_work()).handle(order_id=order_id, user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} cancelled.")


@click.command("refund")
@click.argument("order_id", type=int)
@click.option("--amount", default=None, help="Amount to refund (defaults to the order total).")
def order_refund(order_id: int, amount: str | None) -> None:
    """Refund a returned order."""
    handler = RefundOrderHandler(uow=unit_of_work(), payment_gateway=payment_gateway())

    try:
        dto = handler.handle(order_id=order_id, amount=amount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} refunded ({dto.total}).")
