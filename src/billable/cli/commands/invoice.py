"""Invoice commands."""

from pathlib import Path

import click
from billable.cli.error_handling import handle_domain_error, parse_date_or_exit
from billable.cli.resolution import (
    load_settings_or_exit,
    resolve_client_or_exit,
    resolve_invoice_or_exit,
)
from billable.domain.client import ClientService
from billable.domain.currency import CurrencyConverter
from billable.domain.entities import InvoiceStatus
from billable.domain.errors import DomainError, NotFoundError
from billable.domain.invoice import InvoiceService
from billable.domain.invoice_builder import InvoiceBuilder
from billable.domain.settings import SettingsService
from billable.utils.date_parser import get_date_range


def period_options(func):
    """Options selecting the client and billing period."""
    func = click.option("--notes", help="Notes printed on the invoice")(func)
    func = click.option("--due-date", help="Due date (default: issue date + payment terms)")(func)
    func = click.option("--issue-date", help="Issue date (default: today)")(func)
    func = click.option("--period", help="this-month, last-month, ... instead of --start/--end")(func)
    func = click.option("--end", "end_date", help="Last day of the billing period")(func)
    func = click.option("--start", "start_date", help="First day of the billing period")(func)
    func = click.argument("client", metavar="CLIENT")(func)
    return func


def _builder(ctx, client, start_date, end_date, period, issue_date, due_date, notes) -> InvoiceBuilder:
    db = ctx.obj["db"]
    client_id = resolve_client_or_exit(ctx, ClientService(db), client)
    if period is not None:
        try:
            start, end = get_date_range(period)
        except ValueError as e:
            handle_domain_error(ctx, e)
    else:
        if start_date is None or end_date is None:
            click.echo("Error: Give --start and --end, or --period", err=True)
            ctx.exit(1)
        start = parse_date_or_exit(ctx, start_date, "start date")
        end = parse_date_or_exit(ctx, end_date, "end date")
    return InvoiceBuilder(
        db,
        client_id=client_id,
        period_start=start,
        period_end=end,
        issue_date=parse_date_or_exit(ctx, issue_date, "issue date"),
        due_date=parse_date_or_exit(ctx, due_date, "due date"),
        notes=notes,
    )


@click.group()
def invoice_group():
    """Create and manage invoices."""
    pass


@invoice_group.command("preview")
@period_options
@click.pass_context
def preview_invoice(ctx, client, start_date, end_date, period, issue_date, due_date, notes):
    """Show the draft that 'invoice create' would make, without saving it."""
    preview = _builder(ctx, client, start_date, end_date, period, issue_date, due_date, notes).preview()
    currency = preview.currency or ""

    click.echo(f"\nInvoice preview for {preview.client.name}")
    click.echo(f"Period: {preview.period_start} to {preview.period_end}")
    click.echo(f"Issue date: {preview.issue_date}  Due date: {preview.due_date}")
    click.echo("-" * 60)
    if not preview.line_items:
        click.echo("No unbilled work entries in this period.")
        return
    for item in preview.line_items:
        quantity = f"{item.quantity}h" if item.quantity is not None else ""
        click.echo(f"{item.description:35s} {quantity:>8s} {item.amount:>12.2f} {currency}")
    click.echo("-" * 60)
    click.echo(f"Total hours: {preview.total_hours}")
    click.echo(f"Total amount: {preview.total_amount:.2f} {currency}")
    click.echo(f"Work entries: {len(preview.work_entry_ids)}")


@invoice_group.command("create")
@period_options
@click.pass_context
def create_invoice(ctx, client, start_date, end_date, period, issue_date, due_date, notes):
    """Create a draft invoice from unbilled work of CLIENT.

    Examples:
        billable invoice create Acme --period last-month
        billable invoice create 1 --start 2024-03-01 --end 2024-03-31 --notes "Thank you"
    """
    builder = _builder(ctx, client, start_date, end_date, period, issue_date, due_date, notes)
    result = builder.create_draft()
    if not result.success:
        for message in result.errors:
            click.echo(f"Error: {message}", err=True)
        ctx.exit(1)
    invoice = result.invoice
    click.echo(
        f"Created draft invoice {invoice.number} (ID: {invoice.id}) "
        f"for {invoice.grand_total:.2f} {invoice.currency or ''}".rstrip()
    )


@invoice_group.command("list")
@click.option("--status", type=click.Choice([status.value for status in InvoiceStatus]))
@click.option("--client", help="Client name or ID")
@click.option("--year", type=int, help="Issue year")
@click.pass_context
def list_invoices(ctx, status, client, year):
    """List invoices, newest first."""
    db = ctx.obj["db"]
    client_id = resolve_client_or_exit(ctx, ClientService(db), client) if client else None
    invoices = InvoiceService(db).list_invoices(
        status=InvoiceStatus(status) if status else None, client_id=client_id, year=year
    )
    if not invoices:
        click.echo("No invoices found.")
        return

    for invoice in invoices:
        click.echo(
            f"{invoice.number:10s} | {invoice.issue_date} | {invoice.status.value:5s} | "
            f"{invoice.grand_total:>12.2f} {invoice.currency or ''}"
        )


@invoice_group.command("show")
@click.argument("invoice", metavar="INVOICE")
@click.pass_context
def show_invoice(ctx, invoice: str):
    """Show an invoice with its line items and totals.

    INVOICE can be an invoice number or ID.
    """
    db = ctx.obj["db"]
    service = InvoiceService(db)
    invoice_id = resolve_invoice_or_exit(ctx, service, invoice)
    inv = service.get_invoice(invoice_id)
    currency = inv.currency or ""

    click.echo(f"\nInvoice {inv.number} ({inv.status.value})")
    click.echo(f"Issued {inv.issue_date}, due {inv.due_date}")
    if inv.period_start and inv.period_end:
        click.echo(f"Period: {inv.period_start} to {inv.period_end}")
    if inv.paid_at:
        click.echo(f"Paid on {inv.paid_at}")
    click.echo("-" * 70)
    for row in service.line_items_with_entries(invoice_id):
        item = row.line_item
        quantity = f"{item.quantity}h" if item.quantity is not None else ""
        click.echo(
            f"[{item.position}] {item.description:32s} {quantity:>8s} "
            f"{item.amount:>12.2f}  VAT {item.vat_rate}%  (line {item.id})"
        )
        for entry in row.work_entries:
            click.echo(f"      {entry.date} {entry.description or ''}")
    click.echo("-" * 70)
    click.echo(f"Subtotal:    {inv.subtotal:>12.2f} {currency}")
    for rate, vat in inv.vat_totals_by_rate.items():
        click.echo(f"VAT {rate}%:".ljust(13) + f"{vat:>12.2f} {currency}")
    click.echo(f"Grand total: {inv.grand_total:>12.2f} {currency}")

    try:
        settings = SettingsService(db).get_settings()
    except NotFoundError:
        return
    if inv.currency and inv.currency != settings.main_currency:
        converted = CurrencyConverter(db, settings).main_currency_amount(inv)
        if converted is None:
            click.echo(f"No {inv.currency} exchange rate for {inv.issue_date}")
        else:
            click.echo(f"In {settings.main_currency}: {converted:>12.2f}")


@invoice_group.command("finalize")
@click.argument("invoice", metavar="INVOICE")
@click.pass_context
def finalize_invoice(ctx, invoice: str):
    """Finalize a draft invoice."""
    service = InvoiceService(ctx.obj["db"])
    invoice_id = resolve_invoice_or_exit(ctx, service, invoice)
    try:
        inv = service.finalize(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Finalized invoice {inv.number}")


@invoice_group.command("pay")
@click.argument("invoice", metavar="INVOICE")
@click.option("--date", "paid_at", help="Payment date (default: today)")
@click.pass_context
def pay_invoice(ctx, invoice: str, paid_at: str | None):
    """Mark a final invoice as paid."""
    service = InvoiceService(ctx.obj["db"])
    invoice_id = resolve_invoice_or_exit(ctx, service, invoice)
    try:
        inv = service.mark_as_paid(invoice_id, paid_at=parse_date_or_exit(ctx, paid_at))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Invoice {inv.number} marked as paid on {inv.paid_at}")


@invoice_group.command("delete")
@click.argument("invoice", metavar="INVOICE")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_invoice(ctx, invoice: str, yes: bool):
    """Delete a draft invoice and release its work entries."""
    service = InvoiceService(ctx.obj["db"])
    invoice_id = resolve_invoice_or_exit(ctx, service, invoice)
    inv = service.get_invoice(invoice_id)
    if not yes and not click.confirm(f"Are you sure you want to delete invoice {inv.number}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        service.delete_draft(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted invoice {inv.number}")


@invoice_group.command("qr")
@click.argument("invoice", metavar="INVOICE")
@click.option("--bank-account", "bank_account_id", type=int, help="Bank account ID (default: default account)")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the SVG to this file")
@click.option("--payload", "show_payload", is_flag=True, help="Print the encoded payment text")
@click.pass_context
def invoice_qr(ctx, invoice: str, bank_account_id: int | None, output: str | None, show_payload: bool):
    """Produce a payment QR code for an invoice.

    EUR invoices get an EPC (SEPA) code, CZK invoices a SPAYD code. Without
    --output the code is printed as a data URL.
    """
    service = InvoiceService(ctx.obj["db"])
    invoice_id = resolve_invoice_or_exit(ctx, service, invoice)
    settings = load_settings_or_exit(ctx)
    try:
        generator = service.payment_qr(invoice_id, settings, bank_account_id=bank_account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not generator.available():
        click.echo(
            "Error: No payment QR code available (needs an IBAN, EUR or CZK currency and a positive total)",
            err=True,
        )
        ctx.exit(1)

    if show_payload:
        click.echo(generator.payload())
    elif output:
        Path(output).write_bytes(generator.to_svg())
        click.echo(f"Wrote {generator.format().value.upper()} QR code to {output}")
    else:
        click.echo(generator.to_data_url())


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
