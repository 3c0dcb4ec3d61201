"""Project management commands."""

import click
from billable.cli.error_handling import handle_domain_error, parse_amount_or_exit
from billable.cli.resolution import resolve_client_or_exit
from billable.domain.client import ClientService
from billable.domain.errors import DomainError
from billable.domain.project import ProjectService


@click.group()
def project_group():
    """Manage projects."""
    pass


@project_group.command("add")
@click.argument("client", metavar="CLIENT")
@click.argument("name", metavar="PROJECT_NAME")
@click.option("--rate", help="Hourly rate (defaults to the client's rate)")
@click.pass_context
def add_project(ctx, client: str, name: str, rate: str | None):
    """Create a project for CLIENT (name or ID).

    Examples:
        billable project add Acme "Website redesign" --rate 95
    """
    db = ctx.obj["db"]
    client_id = resolve_client_or_exit(ctx, ClientService(db), client)
    hourly_rate = parse_amount_or_exit(ctx, rate, "rate")

    try:
        project_id = ProjectService(db).create_project(client_id=client_id, name=name, hourly_rate=hourly_rate)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created project '{name}' (ID: {project_id})")


@project_group.command("list")
@click.option("--client", help="Only projects of this client (name or ID)")
@click.pass_context
def list_projects(ctx, client: str | None):
    """List projects."""
    db = ctx.obj["db"]
    client_id = resolve_client_or_exit(ctx, ClientService(db), client) if client else None
    projects = ProjectService(db).list_projects(client_id=client_id)
    if not projects:
        click.echo("No projects found.")
        return

    click.echo("\nProjects:")
    click.echo("-" * 60)
    for project in projects:
        rate = project.effective_hourly_rate
        rate_text = f"{rate}/h" if rate is not None else "no rate"
        click.echo(f"ID: {project.id:3d} | {project.name:25s} | client {project.client_id} | {rate_text}")


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")
