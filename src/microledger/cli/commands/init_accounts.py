"""Initialize the default chart of accounts."""

import click

from microledger.cli.error_handling import handle_domain_error
from microledger.cli.services import account_service
from microledger.domain.errors import StorageError


@click.command("init-accounts")
@click.pass_context
def init_accounts(ctx):
    """Initialize database with the standard chart of accounts.

    Existing account codes are left untouched, so the command can be re-run
    safely after adding custom accounts.
    """
    service = account_service(ctx)
    try:
        created = service.seed_default_chart()
    except (ValueError, StorageError) as e:
        handle_domain_error(ctx, e)

    if not created:
        click.echo("Chart of accounts already initialized; nothing to add.")
        return
    click.echo(f"Created {len(created)} account(s).")


def register_commands(cli):
    """Register init-accounts command with main CLI."""
    cli.add_command(init_accounts)
