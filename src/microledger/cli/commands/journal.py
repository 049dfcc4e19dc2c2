"""Journal entry commands."""

from decimal import Decimal

import click

from microledger.cli.date_filters import (
    collect_period_flags,
    period_options,
    resolve_cli_date,
    resolve_cli_date_range,
)
from microledger.cli.error_handling import handle_domain_error
from microledger.cli.formatting import echo_transaction, format_amount
from microledger.cli.services import journal_service
from microledger.domain.entities import JournalDraft, JournalLine, TransactionType
from microledger.domain.errors import StorageError, UnbalancedEntryError
from microledger.utils.amount_parser import parse_amount

TRANSACTION_TYPES = [t.value for t in TransactionType]


def parse_line_spec(spec: str) -> JournalLine:
    """Parse ``CODE:DEBIT:CREDIT[:DESCRIPTION]`` into a journal line.

    An empty debit or credit field means zero, so ``1010:250:`` is a debit
    of 250 and ``4010::250`` is a credit of 250.

    Raises:
        ValueError: If the spec has too few fields or an amount is invalid
    """
    parts = spec.split(":", 3)
    if len(parts) < 3 or not parts[0].strip():
        raise ValueError(f"Invalid line '{spec}'. Expected CODE:DEBIT:CREDIT[:DESCRIPTION]")
    code, debit, credit = (part.strip() for part in parts[:3])
    description = parts[3].strip() if len(parts) == 4 and parts[3].strip() else None
    return JournalLine(
        account_code=code,
        debit=parse_amount(debit) if debit else Decimal("0"),
        credit=parse_amount(credit) if credit else Decimal("0"),
        description=description,
    )


@click.group()
def journal_group():
    """Post and browse journal entries."""
    pass


@journal_group.command("post")
@click.option(
    "--line",
    "line_specs",
    multiple=True,
    required=True,
    help="Journal line as CODE:DEBIT:CREDIT[:DESCRIPTION] (repeatable)",
)
@click.option("--description", default="", help="Entry description")
@click.option("--date", "entry_date", help="Entry date (default: today)")
@click.option("--reference", help="Reference (default: generated JE-... value)")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice(TRANSACTION_TYPES, case_sensitive=False),
    default=TransactionType.MANUAL.value,
    help="Transaction type tag",
)
@click.option("--party", help="Customer or supplier the entry belongs to")
@click.pass_context
def post_entry(ctx, line_specs, description, entry_date, reference, transaction_type, party):
    """Post a manual journal entry.

    Debits must equal credits and every line must carry exactly one of a
    debit or a credit.

    Examples:
        microledger journal post --line 1010:500: --line 3010::500 --description "Owner capital"
        microledger journal post --date 2025-03-01 --line "5040:1200::March rent" --line 1020::1200
    """
    try:
        lines = tuple(parse_line_spec(spec) for spec in line_specs)
    except ValueError as e:
        handle_domain_error(ctx, e)

    draft = JournalDraft(
        lines=lines,
        description=description,
        date=resolve_cli_date(ctx, entry_date),
        reference=reference,
        transaction_type=TransactionType(transaction_type.lower()),
        party=party,
    )
    try:
        txn = journal_service(ctx).post_journal_entry(draft)
    except UnbalancedEntryError as e:
        click.echo(f"Error: {e}", err=True)
        click.echo(
            f"Debits {format_amount(e.total_debit)} vs credits {format_amount(e.total_credit)}",
            err=True,
        )
        ctx.exit(1)
    except (ValueError, StorageError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Posted transaction {txn.id} ({txn.reference})")


@journal_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'start of month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_options
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice(TRANSACTION_TYPES, case_sensitive=False),
    help="Only list this transaction type",
)
@click.option("--party", help="Only list entries for this customer or supplier")
@click.option("--recent", type=int, help="Show only the N most recent entries, newest first")
@click.option("--lines", "show_lines", is_flag=True, help="Show journal lines")
@click.pass_context
def list_entries(ctx, start_date, end_date, transaction_type, party, recent, show_lines, **period_kwargs):
    """List posted journal entries."""
    service = journal_service(ctx)

    if recent is not None:
        transactions = service.recent_journals(limit=recent)
    else:
        start, end = resolve_cli_date_range(
            ctx,
            start_date=start_date,
            end_date=end_date,
            period_flags=collect_period_flags(period_kwargs),
        )
        transactions = service.list_journals(
            start_date=start,
            end_date=end,
            transaction_type=TransactionType(transaction_type.lower()) if transaction_type else None,
            party=party,
        )

    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        if show_lines:
            echo_transaction(txn)
            continue
        click.echo(
            f"{txn.id:5d} | {txn.date.isoformat()} | {txn.reference:<24} | "
            f"{txn.transaction_type.value:<15} | {format_amount(txn.total_debit):>12} | {txn.description}"
        )


@journal_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_entry(ctx, transaction_id: int):
    """Show one journal entry with its lines."""
    try:
        txn = journal_service(ctx).get_journal(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    echo_transaction(txn)


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
