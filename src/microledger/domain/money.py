"""Decimal helpers shared by the journal and reporting engines."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")

# Every balance comparison in the ledger goes through this constant.
BALANCE_TOLERANCE = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round a number to cents, half-up."""
    if value is None or value == "":
        return ZERO
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def has_cent_precision(value: Decimal) -> bool:
    """Return True if value carries no more precision than cents."""
    return value == value.quantize(CENTS, rounding=ROUND_HALF_UP)


def is_balanced(difference: Decimal) -> bool:
    """Return True if a debit/credit difference is within tolerance of zero."""
    return abs(difference) < BALANCE_TOLERANCE


def money_sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def split_balance(balance: Decimal) -> tuple[Decimal, Decimal]:
    """Split a signed balance into (debit, credit) columns.

    Positive balances go to the debit column, negative ones to the credit
    column as an absolute value, zero leaves both columns empty.
    """
    if balance > 0:
        return balance, ZERO
    if balance < 0:
        return ZERO, -balance
    return ZERO, ZERO


def percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    """Return rate percent of amount, rounded to cents."""
    return to_money(Decimal(amount) * Decimal(rate) / Decimal(100))
