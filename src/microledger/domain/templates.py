"""Canned journal postings for everyday business events.

The ``build_*`` functions are pure: they turn business figures into a
balanced ``JournalDraft`` and never touch storage. ``TemplateService``
posts them through the journal engine, which validates them like any
other entry.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from microledger.database.base import Database
from microledger.domain.chart import DEFAULT_POSTING_ACCOUNTS, PostingAccounts
from microledger.domain.entities import (
    JournalDraft,
    JournalLine,
    PaymentMethod,
    ReturnRecord,
    TaxSettlement,
    TaxStatus,
    Transaction,
    TransactionType,
)
from microledger.domain.errors import (
    AmountExceedsNetTaxError,
    InvalidAmountError,
    ValidationError,
)
from microledger.domain.journal import JournalService
from microledger.domain.money import ZERO, percent_of, to_money
from microledger.domain.reporting import ReportingService


class TemplateKind(str, Enum):
    RECEIPT = "receipt"
    PAYMENT = "payment"
    TRANSFER = "transfer"
    POS_SALE = "pos_sale"
    PURCHASE = "purchase"
    SALES_RETURN = "sales_return"
    PURCHASE_RETURN = "purchase_return"
    TAX_SETTLEMENT = "tax_settlement"
    CUSTOMER_COLLECTION = "customer_collection"
    SUPPLIER_PAYMENT = "supplier_payment"


REFERENCE_PREFIXES = {
    TemplateKind.RECEIPT: "REC",
    TemplateKind.PAYMENT: "PAY",
    TemplateKind.TRANSFER: "TRF",
    TemplateKind.POS_SALE: "INV",
    TemplateKind.PURCHASE: "PUR",
    TemplateKind.SALES_RETURN: "SR",
    TemplateKind.PURCHASE_RETURN: "PR",
    TemplateKind.TAX_SETTLEMENT: "TAX",
    TemplateKind.CUSTOMER_COLLECTION: "REC",
    TemplateKind.SUPPLIER_PAYMENT: "PAY",
}


def _amount(field: str, value, allow_zero: bool = False) -> Decimal:
    """Parse a template amount, rounding to cents and enforcing its sign."""
    try:
        amount = to_money(value)
    except InvalidOperation:
        raise ValidationError(f"{field} is not a valid amount: {value!r}") from None
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmountError(field, value)
    return amount


def _rate(value) -> Decimal:
    try:
        rate = Decimal(str(value if value is not None else 0))
    except InvalidOperation:
        raise ValidationError(f"Tax rate is not a number: {value!r}") from None
    if rate < 0:
        raise ValidationError(f"Tax rate must not be negative (got {value})")
    return rate


def _draft(lines, transaction_type, description, entry_date, reference, party=None) -> JournalDraft:
    """Assemble a draft, dropping zero-amount lines."""
    return JournalDraft(
        lines=tuple(line for line in lines if line.debit or line.credit),
        description=description,
        date=entry_date,
        reference=reference,
        transaction_type=transaction_type,
        party=party or None,
    )


def build_receipt(
    amount,
    accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
    method: PaymentMethod = PaymentMethod.CASH,
    counter_account: Optional[str] = None,
    description: str = "Receipt",
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
) -> JournalDraft:
    """Money received: Dr cash or bank, Cr the counter account (sales by default)."""
    value = _amount("Amount", amount)
    return _draft(
        [
            JournalLine.debit_line(accounts.settlement_account(method), value),
            JournalLine.credit_line(counter_account or accounts.sales_revenue, value),
        ],
        TransactionType.RECEIPT,
        description,
        entry_date,
        reference,
    )


def build_payment(
    amount,
    accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
    method: PaymentMethod = PaymentMethod.CASH,
    counter_account: Optional[str] = None,
    description: str = "Payment",
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
) -> JournalDraft:
    """Money paid out: Dr the counter account (operating expenses by default), Cr cash or bank."""
    value = _amount("Amount", amount)
    return _draft(
        [
            JournalLine.debit_line(counter_account or accounts.operating_expense, value),
            JournalLine.credit_line(accounts.settlement_account(method), value),
        ],
        TransactionType.PAYMENT,
        description,
        entry_date,
        reference,
    )


def build_transfer(
    amount,
    from_account: str,
    to_account: str,
    description: str = "Transfer",
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
) -> JournalDraft:
    """Move money between two accounts: Dr destination, Cr source."""
    value = _amount("Amount", amount)
    if from_account == to_account:
        raise ValidationError("Transfer source and destination must differ")
    return _draft(
        [
            JournalLine.debit_line(to_account, value),
            JournalLine.credit_line(from_account, value),
        ],
        TransactionType.TRANSFER,
        description,
        entry_date,
        reference,
    )


def build_pos_sale(
    subtotal,
    accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
    tax_rate=0,
    discount=0,
    method: PaymentMethod = PaymentMethod.CASH,
    cost=0,
    description: str = "Sale",
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
    party: Optional[str] = None,
) -> JournalDraft:
    """Point-of-sale invoice.

    tax = (subtotal - discount) * rate, total = subtotal - discount + tax.
    Dr cash/bank/receivable total, Dr sales discount, Cr sales subtotal,
    Cr output tax, and Dr COGS / Cr inventory when a cost is given.
    """
    gross = _amount("Subtotal", subtotal)
    disc = _amount("Discount", discount, allow_zero=True)
    if disc > gross:
        raise ValidationError(f"Discount {disc} exceeds subtotal {gross}")
    cost_value = _amount("Cost", cost, allow_zero=True)
    tax = percent_of(gross - disc, _rate(tax_rate))
    total = gross - disc + tax
    settle = accounts.settlement_account(method, on_credit=accounts.receivable)

    lines = [
        JournalLine.debit_line(settle, total),
        JournalLine.debit_line(accounts.sales_discount, disc, "Sales discount"),
        JournalLine.credit_line(accounts.sales_revenue, gross),
        JournalLine.credit_line(accounts.output_tax, tax, "Output tax"),
    ]
    if cost_value > 0:
        lines.append(JournalLine.debit_line(accounts.cogs, cost_value, "Cost of goods sold"))
        lines.append(JournalLine.credit_line(accounts.inventory, cost_value, "Inventory out"))
    return _draft(lines, TransactionType.SALE, description, entry_date, reference, party)


def build_purchase(
    subtotal,
    accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
    tax_rate=0,
    discount=0,
    method: PaymentMethod = PaymentMethod.CREDIT,
    description: str = "Purchase",
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
    party: Optional[str] = None,
) -> JournalDraft:
    """Stock purchase.

    Dr inventory subtotal, Dr input tax, Cr purchase discount,
    Cr cash/bank/payable total.
    """
    gross = _amount("Subtotal", subtotal)
    disc = _amount("Discount", discount, allow_zero=True)
    if disc > gross:
        raise ValidationError(f"Discount {disc} exceeds subtotal {gross}")
    tax = percent_of(gross - disc, _rate(tax_rate))
    total = gross - disc + tax
    settle = accounts.settlement_account(method, on_credit=accounts.payable)

    lines = [
        JournalLine.debit_line(accounts.inventory, gross),
        JournalLine.debit_line(accounts.input_tax, tax, "Input tax"),
        JournalLine.credit_line(accounts.purchase_discount, disc, "Purchase discount"),
        JournalLine.credit_line(settle, total),
    ]
    return _draft(lines, TransactionType.PURCHASE, description, entry_date, reference, party)


def build_sales_return(
    amount,
    accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
    tax_rate=0,
    method: PaymentMethod = PaymentMethod.CASH,
    cost=0,
    description: str = "Sales return",
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
    party: Optional[str] = None,
) -> JournalDraft:
    """Customer return, the mirror of a sale.

    Dr sales returns, Dr output tax, Cr cash/bank/receivable; goods back
    into stock as Dr inventory / Cr COGS when a cost is given.
    """
    value = _amount("Amount", amount)
    cost_value = _amount("Cost", cost, allow_zero=True)
    tax = percent_of(value, _rate(tax_rate))
    settle = accounts.settlement_account(method, on_credit=accounts.receivable)

    lines = [
        JournalLine.debit_line(accounts.sales_returns, value),
        JournalLine.debit_line(accounts.output_tax, tax, "Output tax reversed"),
        JournalLine.credit_line(settle, value + tax),
    ]
    if cost_value > 0:
        lines.append(JournalLine.debit_line(accounts.inventory, cost_value, "Inventory returned"))
        lines.append(JournalLine.credit_line(accounts.cogs, cost_value, "Cost of goods sold reversed"))
    return _draft(lines, TransactionType.SALES_RETURN, description, entry_date, reference, party)


def build_purchase_return(
    amount,
    accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
    tax_rate=0,
    method: PaymentMethod = PaymentMethod.CREDIT,
    description: str = "Purchase return",
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
    party: Optional[str] = None,
) -> JournalDraft:
    """Goods sent back to a supplier: Dr cash/bank/payable, Cr inventory, Cr input tax."""
    value = _amount("Amount", amount)
    tax = percent_of(value, _rate(tax_rate))
    settle = accounts.settlement_account(method, on_credit=accounts.payable)

    lines = [
        JournalLine.debit_line(settle, value + tax),
        JournalLine.credit_line(accounts.inventory, value),
        JournalLine.credit_line(accounts.input_tax, tax, "Input tax reversed"),
    ]
    return _draft(lines, TransactionType.PURCHASE_RETURN, description, entry_date, reference, party)


def build_tax_settlement(
    amount,
    status: TaxStatus,
    accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
    method: PaymentMethod = PaymentMethod.BANK,
    description: Optional[str] = None,
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
) -> JournalDraft:
    """Settle the tax position against cash or bank.

    Payable: Dr output tax / Cr cash-or-bank. Receivable: Dr cash-or-bank /
    Cr input tax.
    """
    value = _amount("Amount", amount)
    settle = accounts.settlement_account(method)
    if status is TaxStatus.PAYABLE:
        lines = [
            JournalLine.debit_line(accounts.output_tax, value),
            JournalLine.credit_line(settle, value),
        ]
        description = description or "Tax payment"
    elif status is TaxStatus.RECEIVABLE:
        lines = [
            JournalLine.debit_line(settle, value),
            JournalLine.credit_line(accounts.input_tax, value),
        ]
        description = description or "Tax refund"
    else:
        raise ValidationError("Tax position is already settled")
    return _draft(lines, TransactionType.TAX_SETTLEMENT, description, entry_date, reference)


def build_customer_collection(
    amount,
    accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
    method: PaymentMethod = PaymentMethod.CASH,
    description: str = "Customer collection",
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
    party: Optional[str] = None,
) -> JournalDraft:
    """Customer pays an open invoice: Dr cash or bank, Cr receivable."""
    value = _amount("Amount", amount)
    return _draft(
        [
            JournalLine.debit_line(accounts.settlement_account(method), value),
            JournalLine.credit_line(accounts.receivable, value),
        ],
        TransactionType.RECEIPT,
        description,
        entry_date,
        reference,
        party,
    )


def build_supplier_payment(
    amount,
    accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
    method: PaymentMethod = PaymentMethod.BANK,
    description: str = "Supplier payment",
    entry_date: Optional[date] = None,
    reference: Optional[str] = None,
    party: Optional[str] = None,
) -> JournalDraft:
    """Pay a supplier: Dr payable, Cr cash or bank."""
    value = _amount("Amount", amount)
    return _draft(
        [
            JournalLine.debit_line(accounts.payable, value),
            JournalLine.credit_line(accounts.settlement_account(method), value),
        ],
        TransactionType.PAYMENT,
        description,
        entry_date,
        reference,
        party,
    )


class TemplateService:
    """Service posting canned journal entries through the journal engine."""

    def __init__(
        self,
        db: Database,
        journal_service: JournalService,
        reporting_service: ReportingService,
        accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS,
        default_tax_rate=0,
    ):
        """Initialize template service.

        Args:
            db: Database instance
            journal_service: Journal engine used to validate and post
            reporting_service: Source of the current tax position
            accounts: Posting account codes
            default_tax_rate: Percent applied when a call gives no tax rate
        """
        self.db = db
        self.journal_service = journal_service
        self.reporting_service = reporting_service
        self.accounts = accounts
        self.default_tax_rate = _rate(default_tax_rate)

    def _tax_rate(self, tax_rate) -> Decimal:
        return self.default_tax_rate if tax_rate is None else _rate(tax_rate)

    def _post(self, kind: TemplateKind, draft: JournalDraft, **satellites) -> Transaction:
        return self.journal_service.post_journal_entry(
            draft, reference_prefix=REFERENCE_PREFIXES[kind], **satellites
        )

    def post_quick_template(self, kind, **params) -> Transaction:
        """Post a canned entry by kind.

        Args:
            kind: TemplateKind (or its value)
            **params: Keyword arguments of the matching ``post_*`` method

        Returns:
            The posted transaction
        """
        try:
            kind = TemplateKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown posting template '{kind}'") from None
        handlers = {
            TemplateKind.RECEIPT: self.post_receipt,
            TemplateKind.PAYMENT: self.post_payment,
            TemplateKind.TRANSFER: self.post_transfer,
            TemplateKind.POS_SALE: self.post_pos_sale,
            TemplateKind.PURCHASE: self.post_purchase,
            TemplateKind.SALES_RETURN: self.post_sales_return,
            TemplateKind.PURCHASE_RETURN: self.post_purchase_return,
            TemplateKind.TAX_SETTLEMENT: self.post_tax_settlement,
            TemplateKind.CUSTOMER_COLLECTION: self.post_customer_collection,
            TemplateKind.SUPPLIER_PAYMENT: self.post_supplier_payment,
        }
        return handlers[kind](**params)

    def post_receipt(self, amount, method=PaymentMethod.CASH, counter_account=None, **kwargs) -> Transaction:
        draft = build_receipt(amount, self.accounts, PaymentMethod(method), counter_account, **kwargs)
        return self._post(TemplateKind.RECEIPT, draft)

    def post_payment(self, amount, method=PaymentMethod.CASH, counter_account=None, **kwargs) -> Transaction:
        draft = build_payment(amount, self.accounts, PaymentMethod(method), counter_account, **kwargs)
        return self._post(TemplateKind.PAYMENT, draft)

    def post_transfer(self, amount, from_account: str, to_account: str, **kwargs) -> Transaction:
        draft = build_transfer(amount, from_account, to_account, **kwargs)
        return self._post(TemplateKind.TRANSFER, draft)

    def post_pos_sale(
        self, subtotal, tax_rate=None, discount=0, method=PaymentMethod.CASH, cost=0, **kwargs
    ) -> Transaction:
        draft = build_pos_sale(
            subtotal,
            self.accounts,
            tax_rate=self._tax_rate(tax_rate),
            discount=discount,
            method=PaymentMethod(method),
            cost=cost,
            **kwargs,
        )
        return self._post(TemplateKind.POS_SALE, draft)

    def post_purchase(
        self, subtotal, tax_rate=None, discount=0, method=PaymentMethod.CREDIT, **kwargs
    ) -> Transaction:
        draft = build_purchase(
            subtotal,
            self.accounts,
            tax_rate=self._tax_rate(tax_rate),
            discount=discount,
            method=PaymentMethod(method),
            **kwargs,
        )
        return self._post(TemplateKind.PURCHASE, draft)

    def post_sales_return(
        self,
        amount,
        tax_rate=None,
        method=PaymentMethod.CASH,
        cost=0,
        party: Optional[str] = None,
        invoice_reference: Optional[str] = None,
        reason: Optional[str] = None,
        details: Optional[str] = None,
        **kwargs,
    ) -> Transaction:
        """Post a customer return and store its return record with it."""
        draft = build_sales_return(
            amount,
            self.accounts,
            tax_rate=self._tax_rate(tax_rate),
            method=PaymentMethod(method),
            cost=cost,
            party=party,
            **kwargs,
        )
        record = self._return_record("sales", draft, party, invoice_reference, reason, details)
        return self._post(TemplateKind.SALES_RETURN, draft, return_record=record)

    def post_purchase_return(
        self,
        amount,
        tax_rate=None,
        method=PaymentMethod.CREDIT,
        party: Optional[str] = None,
        invoice_reference: Optional[str] = None,
        reason: Optional[str] = None,
        details: Optional[str] = None,
        **kwargs,
    ) -> Transaction:
        """Post a return to a supplier and store its return record with it."""
        draft = build_purchase_return(
            amount,
            self.accounts,
            tax_rate=self._tax_rate(tax_rate),
            method=PaymentMethod(method),
            party=party,
            **kwargs,
        )
        record = self._return_record("purchase", draft, party, invoice_reference, reason, details)
        return self._post(TemplateKind.PURCHASE_RETURN, draft, return_record=record)

    def _return_record(self, kind, draft, party, invoice_reference, reason, details) -> ReturnRecord:
        if kind == "sales":
            amount_account, tax_account = self.accounts.sales_returns, self.accounts.output_tax
            amount = sum((line.debit for line in draft.lines if line.account_code == amount_account), ZERO)
            tax = sum((line.debit for line in draft.lines if line.account_code == tax_account), ZERO)
        else:
            amount_account, tax_account = self.accounts.inventory, self.accounts.input_tax
            amount = sum((line.credit for line in draft.lines if line.account_code == amount_account), ZERO)
            tax = sum((line.credit for line in draft.lines if line.account_code == tax_account), ZERO)
        return ReturnRecord(
            kind=kind,
            date=draft.date or date.today(),
            amount=amount,
            tax_amount=tax,
            party=party,
            invoice_reference=invoice_reference,
            reason=reason,
            details=details,
        )

    def post_tax_settlement(
        self, amount, method=PaymentMethod.BANK, notes: Optional[str] = None, **kwargs
    ) -> Transaction:
        """Pay or reclaim the net tax position.

        Raises:
            InvalidAmountError: If amount is not positive
            AmountExceedsNetTaxError: If amount exceeds the absolute net tax
        """
        value = _amount("Amount", amount)
        method = PaymentMethod(method)
        position = self.reporting_service.get_tax_position()
        if value > abs(position.net):
            raise AmountExceedsNetTaxError(value, position.net)

        draft = build_tax_settlement(value, position.status, self.accounts, method, **kwargs)
        settlement = TaxSettlement(
            date=draft.date or date.today(),
            amount=value,
            method=method,
            kind="payment" if position.status is TaxStatus.PAYABLE else "refund",
            reference=draft.reference or "",
            notes=notes,
        )
        return self._post(TemplateKind.TAX_SETTLEMENT, draft, tax_settlement=settlement)

    def post_customer_collection(self, amount, method=PaymentMethod.CASH, **kwargs) -> Transaction:
        draft = build_customer_collection(amount, self.accounts, PaymentMethod(method), **kwargs)
        return self._post(TemplateKind.CUSTOMER_COLLECTION, draft)

    def post_supplier_payment(self, amount, method=PaymentMethod.BANK, **kwargs) -> Transaction:
        draft = build_supplier_payment(amount, self.accounts, PaymentMethod(method), **kwargs)
        return self._post(TemplateKind.SUPPLIER_PAYMENT, draft)

    def list_tax_settlements(self) -> list[TaxSettlement]:
        """List settlement records, newest first."""
        return self.db.list_tax_settlements()

    def list_return_records(self, kind: Optional[str] = None) -> list:
        """List return records, optionally only 'sales' or 'purchase'."""
        return self.db.list_return_records(kind=kind)
