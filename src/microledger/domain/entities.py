"""Domain model entities for microledger.

These are pure data classes representing ledger concepts, independent of
the database schema. Balances are signed as debit minus credit for every
account type; helpers expose the normal-side view used by reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

from microledger.domain.money import ZERO, BALANCE_TOLERANCE, money_sum


class AccountType(str, Enum):
    """The five fixed account kinds."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def is_debit_normal(self) -> bool:
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class TransactionType(str, Enum):
    """Informational tag on a journal entry; posting rules never depend on it."""

    MANUAL = "manual"
    SALE = "sale"
    PURCHASE = "purchase"
    TAX_SETTLEMENT = "tax_settlement"
    SALES_RETURN = "sales_return"
    PURCHASE_RETURN = "purchase_return"
    RECEIPT = "receipt"
    PAYMENT = "payment"
    TRANSFER = "transfer"


class PaymentMethod(str, Enum):
    """How a canned posting settles: cash box, bank, or on account."""

    CASH = "cash"
    BANK = "bank"
    CREDIT = "credit"


class PartyKind(str, Enum):
    """Counterparty whose open balance is tracked on a control account."""

    CUSTOMER = "customer"
    SUPPLIER = "supplier"


class PeriodCheck(str, Enum):
    """Outcome of checking a date against the accounting period."""

    OK = "ok"
    LOCKED = "locked"
    BEFORE_PERIOD_START = "before_period_start"
    AFTER_PERIOD_END = "after_period_end"


class TaxStatus(str, Enum):
    PAYABLE = "payable"
    RECEIVABLE = "receivable"
    SETTLED = "settled"


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry with its cached running balance."""

    code: str
    name: str
    account_type: AccountType
    parent_code: Optional[str]
    opening_balance: Decimal
    balance: Decimal
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def normal_balance(self) -> Decimal:
        """Balance expressed on the account type's normal side."""
        if self.account_type.is_debit_normal:
            return self.balance
        return -self.balance


@dataclass(frozen=True)
class JournalLine:
    """One side of a journal entry: exactly one of debit/credit is non-zero."""

    account_code: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: Optional[str] = None

    @property
    def net(self) -> Decimal:
        """Signed effect on the account balance (debit minus credit)."""
        return self.debit - self.credit

    @classmethod
    def debit_line(cls, account_code: str, amount: Decimal, description: Optional[str] = None) -> JournalLine:
        return cls(account_code=account_code, debit=amount, credit=ZERO, description=description)

    @classmethod
    def credit_line(cls, account_code: str, amount: Decimal, description: Optional[str] = None) -> JournalLine:
        return cls(account_code=account_code, debit=ZERO, credit=amount, description=description)


@dataclass(frozen=True)
class JournalDraft:
    """A journal entry assembled by a caller but not yet validated."""

    lines: tuple[JournalLine, ...]
    description: str = ""
    date: Optional[date] = None
    reference: Optional[str] = None
    transaction_type: TransactionType = TransactionType.MANUAL
    party: Optional[str] = None

    @property
    def total_debit(self) -> Decimal:
        return money_sum(line.debit for line in self.lines)

    @property
    def total_credit(self) -> Decimal:
        return money_sum(line.credit for line in self.lines)

    @property
    def difference(self) -> Decimal:
        return self.total_debit - self.total_credit


@dataclass(frozen=True)
class Transaction:
    """A posted journal entry."""

    id: int
    date: date
    transaction_type: TransactionType
    reference: str
    description: str
    entries: tuple[JournalLine, ...]
    party: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def total_debit(self) -> Decimal:
        return money_sum(line.debit for line in self.entries)

    @property
    def total_credit(self) -> Decimal:
        return money_sum(line.credit for line in self.entries)

    def lines_for(self, account_code: str) -> list[JournalLine]:
        return [line for line in self.entries if line.account_code == account_code]


@dataclass(frozen=True)
class PeriodConfig:
    """The current accounting period and its posting permissions."""

    start_date: date
    end_date: date
    name: str = ""
    is_locked: bool = False
    allow_past_transactions: bool = True
    allow_future_transactions: bool = False


@dataclass(frozen=True)
class TaxSettlement:
    """Record of a tax payment or refund and the transaction that booked it."""

    date: date
    amount: Decimal
    method: PaymentMethod
    kind: str
    reference: str
    notes: Optional[str] = None
    id: Optional[int] = None
    transaction_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReturnRecord:
    """Metadata for a sales or purchase return."""

    kind: str
    date: date
    amount: Decimal
    tax_amount: Decimal = ZERO
    party: Optional[str] = None
    invoice_reference: Optional[str] = None
    reason: Optional[str] = None
    details: Optional[str] = None
    id: Optional[int] = None
    transaction_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LedgerRow:
    """One general-ledger line with the running balance after it."""

    transaction_id: int
    date: date
    reference: str
    description: str
    debit: Decimal
    credit: Decimal
    running_balance: Decimal


@dataclass(frozen=True)
class AccountLedger:
    """General ledger for a single account over an optional date range."""

    account: Account
    start_date: Optional[date]
    end_date: Optional[date]
    opening_balance: Decimal
    rows: tuple[LedgerRow, ...]

    @property
    def total_debit(self) -> Decimal:
        return money_sum(row.debit for row in self.rows)

    @property
    def total_credit(self) -> Decimal:
        return money_sum(row.credit for row in self.rows)

    @property
    def closing_balance(self) -> Decimal:
        if self.rows:
            return self.rows[-1].running_balance
        return self.opening_balance


@dataclass(frozen=True)
class TrialBalanceRow:
    account_code: str
    account_name: str
    account_type: AccountType
    opening_debit: Decimal = ZERO
    opening_credit: Decimal = ZERO
    movement_debit: Decimal = ZERO
    movement_credit: Decimal = ZERO
    closing_debit: Decimal = ZERO
    closing_credit: Decimal = ZERO

    @property
    def has_activity(self) -> bool:
        return any(
            (self.opening_debit, self.opening_credit, self.movement_debit, self.movement_credit)
        )


@dataclass(frozen=True)
class TrialBalanceTotals:
    opening_debit: Decimal = ZERO
    opening_credit: Decimal = ZERO
    movement_debit: Decimal = ZERO
    movement_credit: Decimal = ZERO
    closing_debit: Decimal = ZERO
    closing_credit: Decimal = ZERO

    @property
    def opening_balanced(self) -> bool:
        return abs(self.opening_debit - self.opening_credit) < BALANCE_TOLERANCE

    @property
    def movement_balanced(self) -> bool:
        return abs(self.movement_debit - self.movement_credit) < BALANCE_TOLERANCE

    @property
    def closing_balanced(self) -> bool:
        return abs(self.closing_debit - self.closing_credit) < BALANCE_TOLERANCE


@dataclass(frozen=True)
class TrialBalance:
    """Opening, movement and closing columns for every account as of a date.

    Rows only list accounts with opening balances or movements; totals
    cover every account.
    """

    as_of: date
    rows: tuple[TrialBalanceRow, ...]
    totals: TrialBalanceTotals

    @property
    def is_balanced(self) -> bool:
        return (
            self.totals.opening_balanced
            and self.totals.movement_balanced
            and self.totals.closing_balanced
        )


@dataclass(frozen=True)
class TaxPosition:
    """Output tax owed against input tax recoverable."""

    output_balance: Decimal
    input_balance: Decimal
    net: Decimal
    status: TaxStatus


@dataclass(frozen=True)
class TaxReport:
    start_date: date
    end_date: date
    output_tax: Decimal
    input_tax: Decimal

    @property
    def net_tax(self) -> Decimal:
        return self.output_tax - self.input_tax


@dataclass(frozen=True)
class AccountGroupTotals:
    """Normal-side balance totals per account type as of a date."""

    as_of: date
    assets: Decimal = ZERO
    liabilities: Decimal = ZERO
    equity: Decimal = ZERO
    revenue: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def net_profit(self) -> Decimal:
        return self.revenue - self.expense


@dataclass(frozen=True)
class PartyBalance:
    """Open balance of one customer or supplier.

    ``balance`` is on the control account's normal side: what a customer
    owes us, or what we owe a supplier.
    """

    party: str
    kind: PartyKind
    charged: Decimal
    settled: Decimal
    transaction_count: int = 0

    @property
    def balance(self) -> Decimal:
        return self.charged - self.settled


@dataclass(frozen=True)
class ReconciliationResult:
    """Cached balance against a full replay of the journal."""

    account_code: str
    cached_balance: Decimal
    replayed_balance: Decimal
    movement_count: int = 0
    difference: Decimal = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "difference", self.cached_balance - self.replayed_balance)

    @property
    def is_consistent(self) -> bool:
        return abs(self.difference) < BALANCE_TOLERANCE
