"""Exchange rate commands."""

import click
from billable.cli.error_handling import handle_domain_error, parse_amount_or_exit, parse_date_or_exit
from billable.domain.errors import DomainError
from billable.domain.exchange_rate import ExchangeRateService


@click.group()
def rate_group():
    """Manage exchange rates into the main currency."""
    pass


@rate_group.command("add")
@click.argument("currency")
@click.argument("rate_date", metavar="DATE")
@click.argument("rate")
@click.option("--amount", default=1, show_default=True, type=int, help="Units of CURRENCY the rate is quoted for")
@click.pass_context
def add_rate(ctx, currency: str, rate_date: str, rate: str, amount: int):
    """Record that AMOUNT units of CURRENCY cost RATE in the main currency on DATE.

    Examples:
        billable rate add EUR 2024-03-01 25.125
        billable rate add JPY 2024-03-01 15.30 --amount 100
    """
    service = ExchangeRateService(ctx.obj["db"])
    try:
        rate_id = service.add_rate(
            currency=currency.upper(),
            rate_date=parse_date_or_exit(ctx, rate_date),
            rate=parse_amount_or_exit(ctx, rate, "rate"),
            amount=amount,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Added exchange rate {rate_id}")


@rate_group.command("list")
@click.option("--currency", help="Only rates of this currency")
@click.pass_context
def list_rates(ctx, currency: str | None):
    """List exchange rates, newest first."""
    rates = ExchangeRateService(ctx.obj["db"]).list_rates(currency=currency.upper() if currency else None)
    if not rates:
        click.echo("No exchange rates found.")
        return
    for rate in rates:
        click.echo(f"{rate.date} | {rate.amount} {rate.currency} = {rate.rate}")


def register_commands(cli):
    """Register exchange rate commands with main CLI."""
    cli.add_command(rate_group, name="rate")
