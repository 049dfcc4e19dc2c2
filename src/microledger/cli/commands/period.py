"""Accounting period commands."""

import click

from microledger.cli.date_filters import resolve_cli_date
from microledger.cli.error_handling import handle_domain_error
from microledger.cli.services import period_service
from microledger.domain.entities import PeriodConfig
from microledger.domain.errors import StorageError


def _echo_period(config: PeriodConfig) -> None:
    click.echo(f"Period:          {config.name or '-'}")
    click.echo(f"Start:           {config.start_date.isoformat()}")
    click.echo(f"End:             {config.end_date.isoformat()}")
    click.echo(f"Locked:          {'yes' if config.is_locked else 'no'}")
    click.echo(f"Allow past:      {'yes' if config.allow_past_transactions else 'no'}")
    click.echo(f"Allow future:    {'yes' if config.allow_future_transactions else 'no'}")


@click.group()
def period_group():
    """Show and change the accounting period."""
    pass


@period_group.command("show")
@click.pass_context
def show_period(ctx):
    """Show the current accounting period."""
    _echo_period(period_service(ctx).get_config())


@period_group.command("set")
@click.argument("start_date")
@click.argument("end_date")
@click.option("--name", help="Period name (default: START..END)")
@click.option("--allow-past/--no-allow-past", default=None, help="Accept entries dated before the start")
@click.option("--allow-future/--no-allow-future", default=None, help="Accept entries dated after the end")
@click.pass_context
def set_period(ctx, start_date, end_date, name, allow_past, allow_future):
    """Set the accounting period dates.

    Examples:
        microledger period set 2025-01-01 2025-12-31 --name FY2025
        microledger period set 2025-01-01 2025-03-31 --no-allow-past
    """
    start = resolve_cli_date(ctx, start_date, "start date")
    end = resolve_cli_date(ctx, end_date, "end date")
    try:
        config = period_service(ctx).set_period(
            start, end, name=name, allow_past=allow_past, allow_future=allow_future
        )
    except (ValueError, StorageError) as e:
        handle_domain_error(ctx, e)
    _echo_period(config)


@period_group.command("lock")
@click.pass_context
def lock_period(ctx):
    """Lock the period; no entries can be posted until it is unlocked."""
    try:
        period_service(ctx).lock_period()
    except StorageError as e:
        handle_domain_error(ctx, e)
    click.echo("Accounting period locked.")


@period_group.command("unlock")
@click.pass_context
def unlock_period(ctx):
    """Unlock the period."""
    try:
        period_service(ctx).unlock_period()
    except StorageError as e:
        handle_domain_error(ctx, e)
    click.echo("Accounting period unlocked.")


def register_commands(cli):
    """Register period commands with main CLI."""
    cli.add_command(period_group, name="period")
