"""Reporting commands."""

import click
from billable.cli.resolution import load_settings_or_exit
from billable.domain.reporting import ReportingService


@click.group()
def report_group():
    """Revenue and unbilled work reports."""
    pass


@report_group.command("revenue")
@click.option("--year", type=int, help="Year of issue (default: current year)")
@click.pass_context
def revenue(ctx, year: int | None):
    """Paid revenue of a year in the main currency."""
    settings = load_settings_or_exit(ctx)
    total = ReportingService(ctx.obj["db"], settings).total_in_main_currency(year)
    click.echo(f"Paid revenue: {total.amount:.2f} {total.currency}")
    if total.missing_exchange_rates:
        click.echo("Warning: some invoices have no exchange rate for their issue date and are not included")


@report_group.command("unbilled")
@click.pass_context
def unbilled(ctx):
    """Unbilled work per client."""
    settings = load_settings_or_exit(ctx)
    summaries = ReportingService(ctx.obj["db"], settings).unbilled_summary()
    if not summaries:
        click.echo("No unbilled work.")
        return
    for summary in summaries:
        click.echo(
            f"{summary.client_name:25s} | {summary.project_count} project(s) | "
            f"{summary.total_hours:>7}h | {summary.total_amount:>12.2f} {summary.currency or ''}"
        )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
