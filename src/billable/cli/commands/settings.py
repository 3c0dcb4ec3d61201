"""Ledger settings commands."""

import click
from billable.cli.error_handling import handle_domain_error
from billable.domain.errors import DomainError
from billable.domain.settings import DEFAULT_MAIN_CURRENCY, SettingsService


@click.group()
def settings_group():
    """Manage company details and the main currency."""
    pass


@settings_group.command("init")
@click.option("--company", help="Company name printed on invoices")
@click.option(
    "--currency",
    default=DEFAULT_MAIN_CURRENCY,
    show_default=True,
    help="Main (reporting) currency",
)
@click.pass_context
def init_settings(ctx, company: str | None, currency: str):
    """Create the settings record.

    Run once before issuing invoices. Running it again leaves existing
    settings untouched.

    Examples:
        billable settings init --company "Acme s.r.o." --currency CZK
    """
    service = SettingsService(ctx.obj["db"])
    try:
        settings = service.bootstrap(company_name=company, main_currency=currency.upper())
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Settings ready (main currency: {settings.main_currency})")


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show current settings."""
    service = SettingsService(ctx.obj["db"])
    try:
        settings = service.get_settings()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Company:       {settings.company_name or '-'}")
    click.echo(f"Main currency: {settings.main_currency}")
    click.echo(f"IBAN:          {settings.iban or '-'}")
    click.echo(f"BIC:           {settings.bic or '-'}")
    click.echo(f"Email:         {settings.email or '-'}")
    click.echo(f"VAT ID:        {settings.vat_id or '-'}")


@settings_group.command("set")
@click.option("--company", help="Company name")
@click.option("--currency", help="Main currency")
@click.option("--iban", help="IBAN used when no bank account is configured")
@click.option("--bic", help="BIC/SWIFT code")
@click.option("--email", help="Contact email")
@click.option("--address", help="Postal address")
@click.option("--vat-id", help="VAT registration number")
@click.pass_context
def set_settings(ctx, company, currency, iban, bic, email, address, vat_id):
    """Update settings.

    Examples:
        billable settings set --iban "CZ65 0800 0000 1920 0014 5399" --bic GIBACZPX
    """
    fields = {
        "company_name": company,
        "main_currency": currency.upper() if currency else currency,
        "iban": iban,
        "bic": bic,
        "email": email,
        "address": address,
        "vat_id": vat_id,
    }
    fields = {key: value for key, value in fields.items() if value is not None}
    if not fields:
        click.echo("Nothing to update.")
        return

    service = SettingsService(ctx.obj["db"])
    try:
        service.update_settings(**fields)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated {', '.join(sorted(fields))}")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
