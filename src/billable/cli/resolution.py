"""CLI helpers for client, invoice and settings resolution."""

from __future__ import annotations

import click
from billable.domain.client import ClientService
from billable.domain.entities import Settings
from billable.domain.errors import NotFoundError
from billable.domain.invoice import InvoiceService
from billable.domain.settings import SettingsService
from billable.utils.resolver import resolve_client, resolve_invoice


def resolve_client_or_exit(ctx: click.Context, client_service: ClientService, client: str | int) -> int:
    """Resolve client name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_client(client_service, client)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_invoice_or_exit(ctx: click.Context, invoice_service: InvoiceService, invoice: str | int) -> int:
    """Resolve invoice number or ID, or exit with a CLI error."""
    try:
        return resolve_invoice(invoice_service, invoice)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def load_settings_or_exit(ctx: click.Context) -> Settings:
    """Settings for commands that need the main currency or company details."""
    try:
        return SettingsService(ctx.obj["db"]).get_settings()
    except NotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
