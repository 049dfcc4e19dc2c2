"""Main CLI entry point."""

import click
from microledger.cli.error_handling import LedgerGroup
from microledger.database.factories import create_sqlite_database
from microledger.logging_config import configure_logging

# Import and register all commands at module level
from microledger.cli.commands import (
    account,
    init_accounts,
    journal,
    period,
    quick,
    report,
)


@click.group(cls=LedgerGroup)
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides MICROLEDGER_DB_PATH environment variable)",
    envvar="MICROLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="MICROLEDGER_LOG_LEVEL",
    show_default=True,
    help="Log level for the JSON log written to stderr",
)
@click.option(
    "--tax-rate",
    default="0",
    envvar="MICROLEDGER_TAX_RATE",
    help="Default tax rate in percent for sales, purchases and returns",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, tax_rate: str):
    """Microledger - double-entry bookkeeping for a small business.

    Keep a chart of accounts, post balanced journal entries (by hand or from
    canned sale, purchase, return and tax templates) and produce ledgers,
    trial balances and tax reports replayed from the journal.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["tax_rate"] = tax_rate
        ctx.call_on_close(db.disconnect)


# Register all commands
init_accounts.register_commands(cli)
account.register_commands(cli)
journal.register_commands(cli)
quick.register_commands(cli)
report.register_commands(cli)
period.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
