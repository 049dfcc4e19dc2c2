"""CLI helpers for account resolution and error handling."""

from __future__ import annotations

import click
from microledger.domain.account import AccountService
from microledger.utils.account_resolver import resolve_account_code


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, reference: str
) -> str:
    """Resolve an account code or name, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account_code(account_service, reference)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
