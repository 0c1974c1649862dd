import logging

import click

from storefront.infrastructure.bootstrap import settings
from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
    cart_validate,
)
from storefront.infrastructure.cli.inventory_commands import inventory_set, inventory_show
from storefront.infrastructure.cli.maintenance_commands import (
    purge_reservations,
    reconcile_payments,
)
from storefront.infrastructure.cli.order_commands import (
    order_cancel,
    order_create,
    order_list,
    order_refund,
    order_show,
    order_status,
)
from storefront.infrastructure.cli.product_commands import product_add, product_list


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log at DEBUG level.")
def cli(verbose: bool) -> None:
    """Storefront: carts, stock reservations and orders."""
    level = "DEBUG" if verbose else settings().log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def inventory() -> None:
    """Manage stock levels."""


@cli.group()
def cart() -> None:
    """Manage a user's cart."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def maintenance() -> None:
    """Periodic housekeeping jobs."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_list)
inventory.add_command(inventory_set)
inventory.add_command(inventory_show)
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
cart.add_command(cart_validate)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_refund)
order.add_command(order_show)
order.add_command(order_status)
maintenance.add_command(purge_reservations)
maintenance.add_command(reconcile_payments)
