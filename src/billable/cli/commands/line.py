"""Invoice line item commands (draft invoices only)."""

import click
from billable.cli.error_handling import handle_domain_error, parse_amount_or_exit
from billable.cli.resolution import resolve_invoice_or_exit
from billable.domain.errors import DomainError
from billable.domain.invoice import InvoiceService


@click.group()
def line_group():
    """Edit line items of draft invoices."""
    pass


@line_group.command("add")
@click.argument("invoice", metavar="INVOICE")
@click.argument("description")
@click.argument("amount")
@click.option("--vat", default="0", show_default=True, help="VAT rate in percent")
@click.option("--quantity", help="Quantity shown on the line")
@click.pass_context
def add_line(ctx, invoice: str, description: str, amount: str, vat: str, quantity: str | None):
    """Append a line item to a draft invoice.

    Examples:
        billable line add 2024-001 "Hosting" 120 --vat 21
    """
    service = InvoiceService(ctx.obj["db"])
    invoice_id = resolve_invoice_or_exit(ctx, service, invoice)
    try:
        line_item_id = service.add_line_item(
            invoice_id,
            description=description,
            amount=parse_amount_or_exit(ctx, amount),
            vat_rate=parse_amount_or_exit(ctx, vat, "VAT rate"),
            quantity=parse_amount_or_exit(ctx, quantity, "quantity"),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Added line item {line_item_id}")


@line_group.command("remove")
@click.argument("invoice", metavar="INVOICE")
@click.argument("line_item_id", type=int)
@click.pass_context
def remove_line(ctx, invoice: str, line_item_id: int):
    """Remove a line item; its work entries become unbilled again."""
    service = InvoiceService(ctx.obj["db"])
    invoice_id = resolve_invoice_or_exit(ctx, service, invoice)
    try:
        service.remove_line_item(invoice_id, line_item_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Removed line item {line_item_id}")


@line_group.command("move")
@click.argument("invoice", metavar="INVOICE")
@click.argument("line_item_id", type=int)
@click.argument("direction", type=click.Choice(["up", "down"]))
@click.pass_context
def move_line(ctx, invoice: str, line_item_id: int, direction: str):
    """Move a line item up or down."""
    service = InvoiceService(ctx.obj["db"])
    invoice_id = resolve_invoice_or_exit(ctx, service, invoice)
    try:
        moved = service.reorder_line_item(invoice_id, line_item_id, direction)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    if moved:
        click.echo(f"Moved line item {line_item_id} {direction}")
    else:
        click.echo(f"Line item {line_item_id} cannot move {direction}")


def register_commands(cli):
    """Register line item commands with main CLI."""
    cli.add_command(line_group, name="line")
