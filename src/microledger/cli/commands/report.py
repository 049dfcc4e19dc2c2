"""Reporting commands."""

from datetime import date

import click

from microledger.cli.account_resolution import resolve_account_or_exit
from microledger.cli.date_filters import (
    collect_period_flags,
    period_options,
    resolve_cli_date,
    resolve_cli_date_range,
)
from microledger.cli.error_handling import handle_domain_error
from microledger.cli.formatting import format_amount, format_signed
from microledger.cli.services import account_service, reporting_service
from microledger.domain.entities import PartyKind
from microledger.domain.money import ZERO
from microledger.utils.date_parser import get_date_range


@click.group()
def report_group():
    """Ledger, trial balance and tax reports."""
    pass


@report_group.command("ledger")
@click.argument("account", metavar="ACCOUNT")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'start of month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_options
@click.pass_context
def ledger(ctx, account, start_date, end_date, **period_kwargs):
    """Show the general ledger of one account with running balances.

    ACCOUNT can be an account code or name. Balances are debit minus credit.
    """
    code = resolve_account_or_exit(ctx, account_service(ctx), account)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=collect_period_flags(period_kwargs),
    )
    try:
        result = reporting_service(ctx).get_ledger(code, start_date=start, end_date=end)
    except ValueError as e:
        handle_domain_error(ctx, e)

    acc = result.account
    click.echo(f"\nGeneral ledger: {acc.code} {acc.name}")
    click.echo("-" * 96)
    click.echo(f"{'Date':<10}  {'Reference':<24}  {'Description':<20}  {'Debit':>10}  {'Credit':>10}  {'Balance':>12}")
    click.echo(f"{'':<10}  {'':<24}  {'Opening balance':<20}  {'':>10}  {'':>10}  {format_signed(result.opening_balance):>12}")
    for row in result.rows:
        click.echo(
            f"{row.date.isoformat():<10}  {row.reference[:24]:<24}  {row.description[:20]:<20}  "
            f"{format_amount(row.debit):>10}  {format_amount(row.credit):>10}  "
            f"{format_signed(row.running_balance):>12}"
        )
    click.echo("-" * 96)
    click.echo(
        f"{'':<10}  {'':<24}  {'Totals':<20}  {format_signed(result.total_debit):>10}  "
        f"{format_signed(result.total_credit):>10}  {format_signed(result.closing_balance):>12}"
    )


@report_group.command("trial-balance")
@click.option("--as-of", help="Cutoff date (default: today)")
@click.pass_context
def trial_balance(ctx, as_of):
    """Show opening, movement and closing balances for every active account."""
    cutoff = resolve_cli_date(ctx, as_of, "cutoff date")
    result = reporting_service(ctx).get_trial_balance(cutoff)

    click.echo(f"\nTrial balance as of {result.as_of.isoformat()}")
    header = (
        f"{'Code':<6} {'Account':<26} {'Open Dr':>11} {'Open Cr':>11} "
        f"{'Move Dr':>11} {'Move Cr':>11} {'Close Dr':>11} {'Close Cr':>11}"
    )
    click.echo(header)
    click.echo("-" * len(header))
    for row in result.rows:
        click.echo(
            f"{row.account_code:<6} {row.account_name[:26]:<26} "
            f"{format_amount(row.opening_debit):>11} {format_amount(row.opening_credit):>11} "
            f"{format_amount(row.movement_debit):>11} {format_amount(row.movement_credit):>11} "
            f"{format_amount(row.closing_debit):>11} {format_amount(row.closing_credit):>11}"
        )
    totals = result.totals
    click.echo("-" * len(header))
    click.echo(
        f"{'':<6} {'Totals':<26} "
        f"{format_signed(totals.opening_debit):>11} {format_signed(totals.opening_credit):>11} "
        f"{format_signed(totals.movement_debit):>11} {format_signed(totals.movement_credit):>11} "
        f"{format_signed(totals.closing_debit):>11} {format_signed(totals.closing_credit):>11}"
    )
    if result.is_balanced:
        click.echo("Trial balance is balanced.")
    else:
        click.echo("Warning: trial balance is NOT balanced.", err=True)
        ctx.exit(2)


@report_group.command("tax-position")
@click.option("--as-of", help="Cutoff date (default: all postings)")
@click.pass_context
def tax_position(ctx, as_of):
    """Show output tax against input tax and the net position."""
    cutoff = resolve_cli_date(ctx, as_of, "cutoff date")
    position = reporting_service(ctx).get_tax_position(cutoff)
    click.echo(f"Output tax: {format_signed(position.output_balance):>12}")
    click.echo(f"Input tax:  {format_signed(position.input_balance):>12}")
    click.echo(f"Net tax:    {format_signed(position.net):>12}  ({position.status.value})")


@report_group.command("tax-report")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@period_options
@click.pass_context
def tax_report(ctx, start_date, end_date, **period_kwargs):
    """Summarise tax on sales and purchases over a date range (default: this year)."""
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=collect_period_flags(period_kwargs),
        default_range=get_date_range("this-year"),
    )
    start = start or date.min
    end = end or date.today()
    try:
        result = reporting_service(ctx).get_tax_report(start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Tax report {result.start_date.isoformat()} to {result.end_date.isoformat()}")
    click.echo(f"Output tax on sales:     {format_signed(result.output_tax):>12}")
    click.echo(f"Input tax on purchases:  {format_signed(result.input_tax):>12}")
    click.echo(f"Net tax:                 {format_signed(result.net_tax):>12}")


@report_group.command("groups")
@click.option("--as-of", help="Cutoff date (default: today)")
@click.pass_context
def groups(ctx, as_of):
    """Show totals per account type and net profit."""
    cutoff = resolve_cli_date(ctx, as_of, "cutoff date")
    totals = reporting_service(ctx).get_account_group_totals(cutoff)
    click.echo(f"Account groups as of {totals.as_of.isoformat()}")
    click.echo(f"Assets:      {format_signed(totals.assets):>14}")
    click.echo(f"Liabilities: {format_signed(totals.liabilities):>14}")
    click.echo(f"Equity:      {format_signed(totals.equity):>14}")
    click.echo(f"Revenue:     {format_signed(totals.revenue):>14}")
    click.echo(f"Expenses:    {format_signed(totals.expense):>14}")
    click.echo(f"Net profit:  {format_signed(totals.net_profit):>14}")


@report_group.command("parties")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in PartyKind], case_sensitive=False),
    default=PartyKind.CUSTOMER.value,
    show_default=True,
)
@click.option("--as-of", help="Cutoff date (default: all postings)")
@click.pass_context
def parties(ctx, kind, as_of):
    """Show open customer or supplier balances from tagged postings.

    Customer balances come from the receivable account, supplier balances
    from the payable account.
    """
    cutoff = resolve_cli_date(ctx, as_of, "cutoff date")
    balances = reporting_service(ctx).get_party_balances(PartyKind(kind.lower()), cutoff)
    if not balances:
        click.echo(f"No {kind.lower()} balances found.")
        return

    click.echo(f"{'Party':<24} {'Charged':>12} {'Settled':>12} {'Balance':>12}")
    click.echo("-" * 63)
    for entry in balances:
        click.echo(
            f"{entry.party[:24]:<24} {format_signed(entry.charged):>12} "
            f"{format_signed(entry.settled):>12} {format_signed(entry.balance):>12}"
        )
    click.echo("-" * 63)
    total = sum((entry.balance for entry in balances), ZERO)
    click.echo(f"{'Total':<24} {'':>12} {'':>12} {format_signed(total):>12}")


@report_group.command("reconcile")
@click.argument("account", metavar="ACCOUNT", required=False)
@click.pass_context
def reconcile(ctx, account):
    """Compare cached balances with a full journal replay.

    With ACCOUNT, check one account; otherwise check every account.
    Exits with status 2 if any account differs.
    """
    service = reporting_service(ctx)
    if account is not None:
        code = resolve_account_or_exit(ctx, account_service(ctx), account)
        results = [service.reconcile(code)]
    else:
        results = service.reconcile_all()

    mismatches = [r for r in results if not r.is_consistent]
    for r in mismatches:
        click.echo(
            f"{r.account_code}: cached {format_signed(r.cached_balance)}, "
            f"replayed {format_signed(r.replayed_balance)}, difference {format_signed(r.difference)}"
        )
    if mismatches:
        click.echo(f"{len(mismatches)} account(s) out of balance.", err=True)
        ctx.exit(2)
    click.echo(f"All {len(results)} account(s) reconcile.")


@report_group.command("integrity")
@click.pass_context
def integrity(ctx):
    """List stored transactions whose debits and credits differ."""
    unbalanced = reporting_service(ctx).find_unbalanced_transactions()
    if not unbalanced:
        click.echo("All transactions balance.")
        return
    for txn in unbalanced:
        click.echo(
            f"#{txn.id} {txn.date.isoformat()} {txn.reference}: debits "
            f"{format_signed(txn.total_debit)}, credits {format_signed(txn.total_credit)}"
        )
    click.echo(f"{len(unbalanced)} unbalanced transaction(s).", err=True)
    ctx.exit(2)


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
