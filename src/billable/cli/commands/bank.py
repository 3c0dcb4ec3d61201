"""Bank account commands."""

import click
from billable.cli.error_handling import handle_domain_error
from billable.domain.bank_account import BankAccountService
from billable.domain.errors import DomainError


@click.group()
def bank_group():
    """Manage bank accounts used on invoices."""
    pass


@bank_group.command("add")
@click.argument("name")
@click.argument("iban")
@click.option("--bic", help="BIC/SWIFT code")
@click.option("--currency", help="Currency held on the account")
@click.option("--default", "is_default", is_flag=True, help="Make this the default account")
@click.pass_context
def add_account(ctx, name: str, iban: str, bic: str | None, currency: str | None, is_default: bool):
    """Add a bank account.

    The first account always becomes the default.

    Examples:
        billable bank add "Fio CZK" "CZ65 0800 0000 1920 0014 5399" --bic FIOBCZPP
    """
    service = BankAccountService(ctx.obj["db"])
    try:
        account_id = service.create_account(
            name=name, iban=iban, bic=bic, currency=currency, is_default=is_default
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    account = service.get_account(account_id)
    suffix = " (default)" if account.is_default else ""
    click.echo(f"Added bank account '{name}' (ID: {account_id}){suffix}")


@bank_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List bank accounts."""
    service = BankAccountService(ctx.obj["db"])
    accounts = service.list_accounts()
    if not accounts:
        click.echo("No bank accounts found.")
        return

    click.echo("\nBank accounts:")
    click.echo("-" * 70)
    for acc in accounts:
        marker = "*" if acc.is_default else " "
        click.echo(f"{marker} ID: {acc.id:3d} | {acc.name:20s} | {acc.iban} {acc.bic or ''}")


@bank_group.command("default")
@click.argument("account_id", type=int)
@click.pass_context
def set_default(ctx, account_id: int):
    """Make ACCOUNT_ID the default bank account."""
    service = BankAccountService(ctx.obj["db"])
    try:
        service.set_default(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Bank account {account_id} is now the default")


@bank_group.command("delete")
@click.argument("account_id", type=int)
@click.pass_context
def delete_account(ctx, account_id: int):
    """Delete a bank account."""
    service = BankAccountService(ctx.obj["db"])
    try:
        service.delete_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted bank account {account_id}")


def register_commands(cli):
    """Register bank account commands with main CLI."""
    cli.add_command(bank_group, name="bank")
