"""Quick-entry commands for canned postings."""

import click

from microledger.cli.account_resolution import resolve_account_or_exit
from microledger.cli.date_filters import resolve_cli_date
from microledger.cli.error_handling import handle_domain_error
from microledger.cli.formatting import echo_transaction
from microledger.cli.services import account_service, template_service
from microledger.domain.entities import PaymentMethod
from microledger.domain.errors import StorageError
from microledger.domain.templates import TemplateKind
from microledger.utils.amount_parser import parse_amount

CASH_OR_BANK = click.Choice([PaymentMethod.CASH.value, PaymentMethod.BANK.value], case_sensitive=False)
ANY_METHOD = click.Choice([m.value for m in PaymentMethod], case_sensitive=False)


def common_options(func):
    """Attach --date, --reference and --description to a quick command."""
    func = click.option("--description", help="Entry description")(func)
    func = click.option("--reference", help="Reference (default: generated)")(func)
    func = click.option("--date", "entry_date", help="Entry date (default: today)")(func)
    return func


def _post(ctx, kind: TemplateKind, entry_date, reference, description, **params):
    """Post a template and print the resulting entry, or exit on error."""
    params["entry_date"] = resolve_cli_date(ctx, entry_date)
    params["reference"] = reference
    if description:
        params["description"] = description
    try:
        for key in ("amount", "subtotal", "discount", "cost"):
            if params.get(key) is not None:
                params[key] = parse_amount(params[key])
        txn = template_service(ctx).post_quick_template(kind, **params)
    except (ValueError, StorageError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Posted {kind.value.replace('_', ' ')} {txn.reference} (transaction {txn.id})")
    echo_transaction(txn)
    return txn


def _resolve_optional(ctx, reference):
    if reference is None:
        return None
    return resolve_account_or_exit(ctx, account_service(ctx), reference)


@click.group()
def quick_group():
    """Post common business events from templates."""
    pass


@quick_group.command("receipt")
@click.argument("amount")
@click.option("--method", type=CASH_OR_BANK, default="cash", show_default=True)
@click.option("--account", "counter_account", help="Credited account (default: sales)")
@common_options
@click.pass_context
def receipt(ctx, amount, method, counter_account, entry_date, reference, description):
    """Record money received: Dr cash/bank, Cr ACCOUNT.

    Examples:
        microledger quick receipt 1000
        microledger quick receipt 250 --method bank --account 4050
    """
    _post(
        ctx,
        TemplateKind.RECEIPT,
        entry_date,
        reference,
        description,
        amount=amount,
        method=method,
        counter_account=_resolve_optional(ctx, counter_account),
    )


@quick_group.command("payment")
@click.argument("amount")
@click.option("--method", type=CASH_OR_BANK, default="cash", show_default=True)
@click.option("--account", "counter_account", help="Debited account (default: operating expenses)")
@common_options
@click.pass_context
def payment(ctx, amount, method, counter_account, entry_date, reference, description):
    """Record money paid out: Dr ACCOUNT, Cr cash/bank.

    Examples:
        microledger quick payment 80 --account Utilities
    """
    _post(
        ctx,
        TemplateKind.PAYMENT,
        entry_date,
        reference,
        description,
        amount=amount,
        method=method,
        counter_account=_resolve_optional(ctx, counter_account),
    )


@quick_group.command("transfer")
@click.argument("amount")
@click.argument("from_account", metavar="FROM")
@click.argument("to_account", metavar="TO")
@common_options
@click.pass_context
def transfer(ctx, amount, from_account, to_account, entry_date, reference, description):
    """Move money from one account to another.

    Examples:
        microledger quick transfer 500 Cash Bank
    """
    service = account_service(ctx)
    _post(
        ctx,
        TemplateKind.TRANSFER,
        entry_date,
        reference,
        description,
        amount=amount,
        from_account=resolve_account_or_exit(ctx, service, from_account),
        to_account=resolve_account_or_exit(ctx, service, to_account),
    )


@quick_group.command("sale")
@click.argument("subtotal")
@click.option("--discount", default="0", help="Discount amount")
@click.option("--tax-rate", help="Tax rate in percent (default: global --tax-rate)")
@click.option("--method", type=ANY_METHOD, default="cash", show_default=True)
@click.option("--cost", default="0", help="Cost of goods sold, moved out of inventory")
@click.option("--party", help="Customer name (tracks the customer balance on credit sales)")
@common_options
@click.pass_context
def sale(ctx, subtotal, discount, tax_rate, method, cost, party, entry_date, reference, description):
    """Record a point-of-sale invoice.

    Examples:
        microledger quick sale 100 --tax-rate 15
        microledger quick sale 200 --discount 20 --method credit --cost 120
    """
    _post(
        ctx,
        TemplateKind.POS_SALE,
        entry_date,
        reference,
        description,
        subtotal=subtotal,
        discount=discount,
        tax_rate=tax_rate,
        method=method,
        cost=cost,
        party=party,
    )


@quick_group.command("purchase")
@click.argument("subtotal")
@click.option("--discount", default="0", help="Discount amount")
@click.option("--tax-rate", help="Tax rate in percent (default: global --tax-rate)")
@click.option("--method", type=ANY_METHOD, default="credit", show_default=True)
@click.option("--party", help="Supplier name (tracks the supplier balance on credit purchases)")
@common_options
@click.pass_context
def purchase(ctx, subtotal, discount, tax_rate, method, party, entry_date, reference, description):
    """Record a stock purchase.

    Examples:
        microledger quick purchase 400 --tax-rate 15
    """
    _post(
        ctx,
        TemplateKind.PURCHASE,
        entry_date,
        reference,
        description,
        subtotal=subtotal,
        discount=discount,
        tax_rate=tax_rate,
        method=method,
        party=party,
    )


@quick_group.command("sales-return")
@click.argument("amount")
@click.option("--tax-rate", help="Tax rate in percent (default: global --tax-rate)")
@click.option("--method", type=ANY_METHOD, default="cash", show_default=True)
@click.option("--cost", default="0", help="Cost of the goods returned to inventory")
@click.option("--party", help="Customer name")
@click.option("--invoice", "invoice_reference", help="Original invoice reference")
@click.option("--reason", help="Reason for the return")
@common_options
@click.pass_context
def sales_return(
    ctx, amount, tax_rate, method, cost, party, invoice_reference, reason,
    entry_date, reference, description,
):
    """Record goods returned by a customer."""
    _post(
        ctx,
        TemplateKind.SALES_RETURN,
        entry_date,
        reference,
        description,
        amount=amount,
        tax_rate=tax_rate,
        method=method,
        cost=cost,
        party=party,
        invoice_reference=invoice_reference,
        reason=reason,
    )


@quick_group.command("purchase-return")
@click.argument("amount")
@click.option("--tax-rate", help="Tax rate in percent (default: global --tax-rate)")
@click.option("--method", type=ANY_METHOD, default="credit", show_default=True)
@click.option("--party", help="Supplier name")
@click.option("--invoice", "invoice_reference", help="Original purchase invoice reference")
@click.option("--reason", help="Reason for the return")
@common_options
@click.pass_context
def purchase_return(
    ctx, amount, tax_rate, method, party, invoice_reference, reason,
    entry_date, reference, description,
):
    """Record goods returned to a supplier."""
    _post(
        ctx,
        TemplateKind.PURCHASE_RETURN,
        entry_date,
        reference,
        description,
        amount=amount,
        tax_rate=tax_rate,
        method=method,
        party=party,
        invoice_reference=invoice_reference,
        reason=reason,
    )


@quick_group.command("collect")
@click.argument("amount")
@click.option("--method", type=CASH_OR_BANK, default="cash", show_default=True)
@click.option("--party", help="Paying customer")
@common_options
@click.pass_context
def collect(ctx, amount, method, party, entry_date, reference, description):
    """Record a customer paying an open invoice."""
    _post(
        ctx,
        TemplateKind.CUSTOMER_COLLECTION,
        entry_date,
        reference,
        description,
        amount=amount,
        method=method,
        party=party,
    )


@quick_group.command("pay-supplier")
@click.argument("amount")
@click.option("--method", type=CASH_OR_BANK, default="bank", show_default=True)
@click.option("--party", help="Supplier being paid")
@common_options
@click.pass_context
def pay_supplier(ctx, amount, method, party, entry_date, reference, description):
    """Record a payment to a supplier."""
    _post(
        ctx,
        TemplateKind.SUPPLIER_PAYMENT,
        entry_date,
        reference,
        description,
        amount=amount,
        method=method,
        party=party,
    )


@quick_group.command("settle-tax")
@click.argument("amount")
@click.option("--method", type=CASH_OR_BANK, default="bank", show_default=True)
@click.option("--notes", help="Settlement notes")
@common_options
@click.pass_context
def settle_tax(ctx, amount, method, notes, entry_date, reference, description):
    """Pay net tax due, or record a refund of net tax receivable.

    The amount may not exceed the current net tax position.
    """
    _post(
        ctx,
        TemplateKind.TAX_SETTLEMENT,
        entry_date,
        reference,
        description,
        amount=amount,
        method=method,
        notes=notes,
    )


def register_commands(cli):
    """Register quick-entry commands with main CLI."""
    cli.add_command(quick_group, name="quick")
