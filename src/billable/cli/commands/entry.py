"""Work entry commands."""

from datetime import date

import click
from billable.cli.error_handling import handle_domain_error, parse_amount_or_exit, parse_date_or_exit
from billable.cli.resolution import resolve_client_or_exit
from billable.domain.client import ClientService
from billable.domain.entities import WorkStatus
from billable.domain.errors import DomainError
from billable.domain.work_entry import WorkEntryService
from billable.utils.date_parser import get_date_range


@click.group()
def entry_group():
    """Log billable work."""
    pass


@entry_group.command("add")
@click.argument("project_id", type=int)
@click.option("--date", "entry_date", help="Day of the work (default: today)")
@click.option("--hours", help="Hours worked")
@click.option("--amount", help="Fixed price, or an amount overriding hours x rate")
@click.option("--rate", help="Hourly rate (default: project rate)")
@click.option("--description", "-d", help="What was done")
@click.pass_context
def add_entry(ctx, project_id, entry_date, hours, amount, rate, description):
    """Log work on PROJECT_ID.

    Give --hours for time work or only --amount for a fixed-price item.

    Examples:
        billable entry add 1 --hours 7.5 -d "API design"
        billable entry add 1 --amount 500 --date 2024-03-01 -d "Logo"
    """
    service = WorkEntryService(ctx.obj["db"])
    try:
        entry_id = service.create_entry(
            project_id=project_id,
            entry_date=parse_date_or_exit(ctx, entry_date) or date.today(),
            hours=parse_amount_or_exit(ctx, hours, "hours"),
            amount=parse_amount_or_exit(ctx, amount),
            hourly_rate=parse_amount_or_exit(ctx, rate, "rate"),
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Logged work entry {entry_id}")


@entry_group.command("list")
@click.option("--client", help="Client name or ID")
@click.option("--project", "project_id", type=int, help="Project ID")
@click.option(
    "--status",
    type=click.Choice([status.value for status in WorkStatus]),
    help="Billing status",
)
@click.option("--start-date", help="First day to include")
@click.option("--end-date", help="Last day to include")
@click.option("--period", help="this-month, last-month, this-year, ...")
@click.pass_context
def list_entries(ctx, client, project_id, status, start_date, end_date, period):
    """List work entries, oldest first."""
    db = ctx.obj["db"]
    client_id = resolve_client_or_exit(ctx, ClientService(db), client) if client else None

    if period is not None:
        try:
            start, end = get_date_range(period)
        except ValueError as e:
            handle_domain_error(ctx, e)
            return
    else:
        start = parse_date_or_exit(ctx, start_date, "start date")
        end = parse_date_or_exit(ctx, end_date, "end date")

    entries = WorkEntryService(db).list_entries(
        project_id=project_id,
        client_id=client_id,
        status=WorkStatus(status) if status else None,
        start_date=start,
        end_date=end,
    )
    if not entries:
        click.echo("No work entries found.")
        return

    for entry in entries:
        quantity = f"{entry.hours}h" if entry.hours is not None else "fixed"
        amount = entry.calculated_amount()
        amount_text = f"{amount:.2f}" if amount is not None else "-"
        click.echo(
            f"ID: {entry.id:4d} | {entry.date} | project {entry.project_id} | {quantity:>7s} | "
            f"{amount_text:>10s} | {entry.status.value:8s} | {entry.description or ''}"
        )


@entry_group.command("delete")
@click.argument("entry_id", type=int)
@click.pass_context
def delete_entry(ctx, entry_id: int):
    """Delete an unbilled work entry."""
    try:
        WorkEntryService(ctx.obj["db"]).delete_entry(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted work entry {entry_id}")


def register_commands(cli):
    """Register work entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")
