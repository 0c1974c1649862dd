"""CLI commands for stock levels."""

from __future__ import annotations

import click

from storefront.application.set_inventory import SetInventoryHandler
from storefront.application.show_inventory import ShowInventoryHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import unit_of_work


@click.command("set")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Total quantity in stock.")
def inventory_set(product_id: str, quantity: int) -> None:
    """Set the stock level of a product."""
    handler = SetInventoryHandler(uow=unit_of_work())

    try:
        handler.handle(product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for product #{product_id} set to {quantity}")


@click.command("show")
def inventory_show() -> None:
    """Show stock, held and available quantities."""
    handler = ShowInventoryHandler(uow=unit_of_work())
    try:
        lines = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Product':<20} {'Total':>8} {'Held':>8} {'Available':>10}")
    click.echo("-" * 56)
    for line in lines:
        click.echo(
            f"{line.product_id:<6} {line.product_name:<20} {line.total:>8} "
            f"{line.reserved:>8} {line.available:>10}"
        )
