"""Shared domain error types for the ledger.

Every concrete error carries a stable ``code`` class attribute and the
structured data a caller needs to explain the rejection, so callers can
catch by type and never parse messages.
"""

from decimal import Decimal
from typing import Iterable, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """

    code: str = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    code: str = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    code: str = "NOT_FOUND"


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""

    code: str = "CONFLICT"


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""

    code: str = "DEPENDENCY"


# Chart of accounts


class DuplicateCodeError(ConflictError):
    code: str = "DUPLICATE_CODE"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Account code '{account_code}' already exists")


class InvalidParentError(ValidationError):
    code: str = "INVALID_PARENT"

    def __init__(self, account_code: str, parent_code: str, reason: str):
        self.account_code = account_code
        self.parent_code = parent_code
        self.reason = reason
        super().__init__(f"Invalid parent '{parent_code}' for account '{account_code}': {reason}")


class InvalidAccountTypeError(ValidationError):
    code: str = "INVALID_TYPE"

    def __init__(self, account_type):
        self.account_type = account_type
        super().__init__(
            f"Invalid account type '{account_type}'. "
            "Must be one of: asset, liability, equity, revenue, expense"
        )


class AccountNotFoundError(NotFoundError):
    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Account '{account_code}' not found")


class HasTransactionsError(DependencyError):
    code: str = "HAS_TRANSACTIONS"

    def __init__(self, account_code: str, transaction_count: int):
        self.account_code = account_code
        self.transaction_count = transaction_count
        plural = "s" if transaction_count != 1 else ""
        super().__init__(
            f"Cannot delete account '{account_code}': it is referenced by "
            f"{transaction_count} transaction{plural}"
        )


class HasChildAccountsError(DependencyError):
    code: str = "HAS_CHILD_ACCOUNTS"

    def __init__(self, account_code: str, child_codes: Iterable[str]):
        self.account_code = account_code
        self.child_codes = list(child_codes)
        super().__init__(
            f"Cannot delete account '{account_code}': it has child accounts "
            f"{', '.join(self.child_codes)}"
        )


# Journal validation


class UnknownAccountError(ValidationError):
    """A journal line references an account code that does not exist."""

    code: str = "UNKNOWN_ACCOUNT"

    def __init__(self, account_codes: Iterable[str]):
        self.account_codes = list(account_codes)
        super().__init__(f"Unknown account(s): {', '.join(self.account_codes)}")


class MalformedLineError(ValidationError):
    """A journal line is not exactly one positive debit or one positive credit."""

    code: str = "MALFORMED_LINE"

    def __init__(self, line_index: int, reason: str):
        self.line_index = line_index
        self.reason = reason
        super().__init__(f"Line {line_index + 1} is malformed: {reason}")


class UnbalancedEntryError(ValidationError):
    """Journal entry debits do not equal credits.

    ``difference`` is signed as total debit minus total credit.
    """

    code: str = "UNBALANCED"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.difference = total_debit - total_credit
        super().__init__(
            f"Entry is unbalanced: debits={total_debit}, credits={total_credit}, "
            f"difference={self.difference}"
        )


class InsufficientLinesError(ValidationError):
    code: str = "INSUFFICIENT_LINES"

    def __init__(self, line_count: int, account_count: int):
        self.line_count = line_count
        self.account_count = account_count
        super().__init__(
            "A journal entry needs at least 2 lines touching at least 2 distinct accounts "
            f"(got {line_count} line(s), {account_count} account(s))"
        )


class PeriodClosedError(ValidationError):
    code: str = "PERIOD_CLOSED"

    def __init__(self, entry_date, period_name: Optional[str] = None):
        self.entry_date = entry_date
        self.period_name = period_name
        label = f" '{period_name}'" if period_name else ""
        super().__init__(f"Accounting period{label} is locked; cannot post on {entry_date}")


class OutOfPeriodError(ValidationError):
    code: str = "OUT_OF_PERIOD"

    def __init__(self, entry_date, check, start_date, end_date):
        self.entry_date = entry_date
        self.check = check
        self.start_date = start_date
        self.end_date = end_date
        side = "before" if check.value == "before_period_start" else "after"
        super().__init__(
            f"Date {entry_date} is {side} the accounting period {start_date} to {end_date}"
        )


# Posting templates


class InvalidAmountError(ValidationError):
    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, amount):
        self.field = field
        self.amount = amount
        super().__init__(f"{field} must be greater than zero (got {amount})")


class AmountExceedsNetTaxError(ValidationError):
    code: str = "AMOUNT_EXCEEDS_NET_TAX"

    def __init__(self, amount: Decimal, net_tax: Decimal):
        self.amount = amount
        self.net_tax = net_tax
        super().__init__(
            f"Settlement amount {amount} exceeds the net tax position {abs(net_tax)}"
        )


class StorageError(RuntimeError):
    """The ledger store failed; the unit of work was rolled back."""

    code: str = "STORAGE_ERROR"

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Storage failure during {operation}{detail}")
