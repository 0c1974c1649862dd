"""Housekeeping commands, meant to be run from cron or a scheduler."""

from __future__ import annotations

import click

from storefront.application.purge_reservations import PurgeExpiredReservationsHandler
from storefront.application.reconcile_payments import ReconcilePaymentsHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import payment_gateway, unit_of_work


@click.command("purge-reservations")
def purge_reservations() -> None:
    """Delete expired stock reservations."""
    try:
        removed = PurgeExpiredReservationsHandler(uow=unit_of_work()).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Removed {removed} expired reservation(s).")


@click.command("reconcile-payments")
def reconcile_payments() -> None:
    """Issue payments that a failed post-commit step left missing."""
    handler = ReconcilePaymentsHandler(uow=unit_of_work(), payment_gateway=payment_gateway())

    try:
        repaired = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not repaired:
        click.echo("Nothing to reconcile.")
        return
    for number in repaired:
        click.echo(f"Repaired {number}")
