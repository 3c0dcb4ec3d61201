"""Money transaction commands."""

import click
from billable.cli.error_handling import handle_domain_error, parse_amount_or_exit, parse_date_or_exit
from billable.domain.entities import TransactionType
from billable.domain.errors import DomainError
from billable.domain.matching import InvoiceMatchingService
from billable.domain.money_transaction import MoneyTransactionService


@click.group()
def txn_group():
    """Record bank transactions and match them to invoices."""
    pass


@txn_group.command("add")
@click.argument("amount")
@click.argument("currency")
@click.option("--date", "transacted_on", help="Value date (default: today)", default="today")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType]),
    default=TransactionType.INCOME.value,
    show_default=True,
)
@click.option("--reference", help="Payment reference / variable symbol")
@click.option("--source", default="manual", show_default=True, help="Where the transaction comes from")
@click.option("--external-id", help="ID of the transaction at its source")
@click.option("--description", "-d", help="Free text")
@click.pass_context
def add_transaction(ctx, amount, currency, transacted_on, transaction_type, reference, source, external_id, description):
    """Record a bank transaction.

    Examples:
        billable txn add 1210.00 EUR --reference 2024-001 --date 2024-04-02
    """
    service = MoneyTransactionService(ctx.obj["db"])
    try:
        txn_id = service.record_transaction(
            source=source,
            transaction_type=TransactionType(transaction_type),
            amount=parse_amount_or_exit(ctx, amount),
            currency=currency.upper(),
            transacted_on=parse_date_or_exit(ctx, transacted_on),
            reference=reference,
            external_id=external_id,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Recorded transaction {txn_id}")


@txn_group.command("list")
@click.option("--unmatched", is_flag=True, help="Only transactions not linked to an invoice")
@click.pass_context
def list_transactions(ctx, unmatched: bool):
    """List transactions."""
    transactions = MoneyTransactionService(ctx.obj["db"]).list_transactions(unmatched_only=unmatched)
    if not transactions:
        click.echo("No transactions found.")
        return
    for txn in transactions:
        linked = f"invoice {txn.invoice_id}" if txn.invoice_id is not None else "unmatched"
        click.echo(
            f"ID: {txn.id:4d} | {txn.transacted_on} | {txn.transaction_type.value:7s} | "
            f"{txn.amount:>12.2f} {txn.currency} | {txn.reference or '-':12s} | {linked}"
        )


@txn_group.command("match")
@click.argument("transaction_id", type=int, required=False)
@click.pass_context
def match_transactions(ctx, transaction_id: int | None):
    """Match transactions to final invoices by reference and exact amount.

    Without TRANSACTION_ID every unmatched income transaction is tried.
    """
    db = ctx.obj["db"]
    matcher = InvoiceMatchingService(db)

    if transaction_id is None:
        summary = matcher.match_all()
        for result in summary.results:
            if result.success:
                click.echo(f"Transaction {result.transaction_id} paid invoice {result.invoice.number}")
        click.echo(f"Matched {summary.matched}, unmatched {summary.failed}")
        return

    transaction = MoneyTransactionService(db).get_transaction(transaction_id)
    if transaction is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)
    result = matcher.match(transaction)
    if not result.success:
        click.echo(f"Error: {result.error}", err=True)
        ctx.exit(1)
    click.echo(f"Transaction {transaction_id} paid invoice {result.invoice.number}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(txn_group, name="txn")
