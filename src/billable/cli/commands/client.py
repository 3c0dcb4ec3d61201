"""Client management commands."""

import click
from billable.cli.error_handling import handle_domain_error, parse_amount_or_exit
from billable.cli.resolution import resolve_client_or_exit
from billable.domain.client import ClientService
from billable.domain.errors import DomainError
from billable.utils.payment_terms import parse_payment_terms


@click.group()
def client_group():
    """Manage clients."""
    pass


@client_group.command("add")
@click.argument("name", metavar="CLIENT_NAME")
@click.option("--currency", help="Invoice currency (e.g., EUR, CZK)")
@click.option("--rate", help="Default hourly rate")
@click.option("--terms", help='Payment terms in days ("30" or "Net 30")')
@click.option("--vat", help="Default VAT rate in percent")
@click.option("--email", help="Contact email")
@click.option("--address", help="Postal address")
@click.option("--vat-id", help="VAT registration number")
@click.pass_context
def add_client(ctx, name, currency, rate, terms, vat, email, address, vat_id):
    """Create a new client.

    Examples:
        billable client add "Acme" --currency EUR --rate 80 --terms "Net 14" --vat 21
    """
    hourly_rate = parse_amount_or_exit(ctx, rate, "rate")
    vat_rate = parse_amount_or_exit(ctx, vat, "VAT rate")
    payment_terms_days = None
    if terms is not None:
        payment_terms_days = parse_payment_terms(terms)
        if payment_terms_days is None:
            click.echo(f"Error: Could not read payment terms '{terms}'", err=True)
            ctx.exit(1)

    service = ClientService(ctx.obj["db"])
    kwargs = {}
    if vat_rate is not None:
        kwargs["default_vat_rate"] = vat_rate
    try:
        client_id = service.create_client(
            name=name,
            currency=currency.upper() if currency else None,
            hourly_rate=hourly_rate,
            payment_terms_days=payment_terms_days,
            email=email,
            address=address,
            vat_id=vat_id,
            **kwargs,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created client '{name}' (ID: {client_id})")


@client_group.command("list")
@click.pass_context
def list_clients(ctx):
    """List all clients."""
    service = ClientService(ctx.obj["db"])
    clients = service.list_clients()
    if not clients:
        click.echo("No clients found.")
        return

    click.echo("\nClients:")
    click.echo("-" * 70)
    for client in clients:
        rate = f"{client.hourly_rate}/h" if client.hourly_rate is not None else "-"
        terms = f"Net {client.payment_terms_days}" if client.payment_terms_days is not None else "-"
        click.echo(
            f"ID: {client.id:3d} | {client.name:20s} | {client.currency or '---'} | "
            f"{rate:>10s} | {terms} | VAT {client.default_vat_rate}%"
        )


@client_group.command("delete")
@click.argument("client", metavar="CLIENT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_client(ctx, client: str, yes: bool):
    """Delete a client.

    CLIENT can be a client name or ID. Clients with projects or invoices
    cannot be deleted.
    """
    service = ClientService(ctx.obj["db"])
    client_id = resolve_client_or_exit(ctx, service, client)
    client_obj = service.get_client(client_id)

    if not yes and not click.confirm(f"Are you sure you want to delete client '{client_obj.name}' (ID: {client_id})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_client(client_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted client '{client_obj.name}'")


def register_commands(cli):
    """Register client commands with main CLI."""
    cli.add_command(client_group, name="client")
