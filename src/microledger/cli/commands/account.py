"""Account management commands."""

import click

from microledger.cli.account_resolution import resolve_account_or_exit
from microledger.cli.error_handling import handle_domain_error
from microledger.cli.formatting import format_signed
from microledger.cli.services import account_service, reporting_service
from microledger.domain.entities import AccountType
from microledger.domain.errors import StorageError
from microledger.utils.amount_parser import parse_amount

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="NAME")
@click.option(
    "--type",
    "account_type",
    required=True,
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Account type",
)
@click.option("--parent", help="Parent account code (must have the same type)")
@click.option("--opening-balance", default="0", help="Opening balance, debit positive")
@click.option("--description", help="Account description")
@click.pass_context
def create_account(ctx, code, name, account_type, parent, opening_balance, description):
    """Create a new account.

    Examples:
        microledger account create 1015 "Petty cash" --type asset --parent 1000
        microledger account create 3010 Capital --type equity --opening-balance -5000
    """
    service = account_service(ctx)
    try:
        opening = parse_amount(opening_balance)
        acc = service.create_account(
            code=code,
            name=name,
            account_type=account_type,
            parent_code=parent,
            opening_balance=opening,
            description=description,
        )
    except (ValueError, StorageError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account {acc.code} '{acc.name}' ({acc.account_type.value})")


@account_group.command("list")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Only list accounts of this type",
)
@click.option("--tree", is_flag=True, help="Show the account hierarchy")
@click.pass_context
def list_accounts(ctx, account_type, tree):
    """List accounts with their cached balances."""
    service = account_service(ctx)

    if tree:
        nodes = service.get_account_tree()
        if not nodes:
            click.echo("No accounts found.")
            return

        def show(nodes, depth):
            for node in nodes:
                acc = node["account"]
                label = f"{'    ' * depth}{acc.code} {acc.name}"
                click.echo(f"{label:<48} {format_signed(acc.normal_balance):>14}")
                show(node["children"], depth + 1)

        show(nodes, 0)
        return

    accounts = service.list_accounts(account_type=account_type)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 78)
    for acc in accounts:
        click.echo(
            f"{acc.code:<8} | {acc.name:<30} | {acc.account_type.value:<9} | "
            f"{format_signed(acc.normal_balance):>14}"
        )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account):
    """Show one account, checking its cached balance against the journal.

    ACCOUNT can be an account code or name.
    """
    service = account_service(ctx)
    code = resolve_account_or_exit(ctx, service, account)
    acc = service.require_account(code)
    result = reporting_service(ctx).reconcile(code)

    click.echo(f"Code:            {acc.code}")
    click.echo(f"Name:            {acc.name}")
    click.echo(f"Type:            {acc.account_type.value}")
    click.echo(f"Parent:          {acc.parent_code or '-'}")
    if acc.description:
        click.echo(f"Description:     {acc.description}")
    click.echo(f"Opening balance: {format_signed(acc.opening_balance)}")
    click.echo(f"Balance:         {format_signed(acc.balance)} (debit - credit)")
    click.echo(f"Lines posted:    {result.movement_count}")
    if not result.is_consistent:
        click.echo(
            f"Warning: journal replay gives {format_signed(result.replayed_balance)}",
            err=True,
        )


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--description", help="New description (optional)")
@click.pass_context
def rename_account(ctx, account: str, new_name: str, description: str | None) -> None:
    """Rename an account.

    ACCOUNT can be an account code or name. Type, parent and opening
    balance cannot be changed.

    Examples:
        microledger account rename 1010 "Cash box"
        microledger account rename Bank "Main bank" --description "Current account"
    """
    service = account_service(ctx)
    code = resolve_account_or_exit(ctx, service, account)
    try:
        service.update_account_details(code, name=new_name, description=description)
    except (ValueError, StorageError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Renamed account {code} to '{new_name}'")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account code or name.

    The account can only be deleted if no journal line references it and it
    has no child accounts.

    Examples:
        microledger account delete 5060
    """
    service = account_service(ctx)
    code = resolve_account_or_exit(ctx, service, account)
    acc = service.require_account(code)

    if not yes and not click.confirm(f"Are you sure you want to delete account {code} '{acc.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(code)
    except (ValueError, StorageError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account {code} '{acc.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
