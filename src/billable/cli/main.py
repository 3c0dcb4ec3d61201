"""Main CLI entry point."""

import click
from billable.database.factories import create_sqlite_database
from billable.logging_config import DEFAULT_LEVEL, configure_logging

# Import and register all commands at module level
from billable.cli.commands import (
    settings,
    bank,
    client,
    project,
    entry,
    invoice,
    line,
    rate,
    txn,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BILLABLE_DB_PATH environment variable)",
    envvar="BILLABLE_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=DEFAULT_LEVEL,
    show_default=True,
    help="Logging level (overrides BILLABLE_LOG_LEVEL environment variable)",
    envvar="BILLABLE_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Billable - Invoicing for freelancers.

    Log billable work per client and project, turn it into invoices with
    VAT and payment QR codes, and reconcile incoming bank payments.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
settings.register_commands(cli)
bank.register_commands(cli)
client.register_commands(cli)
project.register_commands(cli)
entry.register_commands(cli)
invoice.register_commands(cli)
line.register_commands(cli)
rate.register_commands(cli)
txn.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
