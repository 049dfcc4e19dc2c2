"""Plain-text rendering helpers shared by CLI commands."""

from decimal import Decimal

import click

from microledger.domain.entities import Transaction


def format_amount(value: Decimal | None) -> str:
    """Format an amount with thousands separators; zero renders blank."""
    if not value:
        return ""
    return f"{value:,.2f}"


def format_signed(value: Decimal) -> str:
    return f"{value:,.2f}"


def echo_transaction(txn: Transaction) -> None:
    """Print a transaction header and its lines."""
    click.echo(
        f"#{txn.id}  {txn.date.isoformat()}  {txn.reference}  "
        f"[{txn.transaction_type.value}]  {txn.description}"
    )
    if txn.party:
        click.echo(f"    Party: {txn.party}")
    for line in txn.entries:
        click.echo(
            f"    {line.account_code:<8} {format_amount(line.debit):>14} "
            f"{format_amount(line.credit):>14}  {line.description or ''}"
        )
    click.echo(
        f"    {'Total':<8} {format_signed(txn.total_debit):>14} {format_signed(txn.total_credit):>14}"
    )
