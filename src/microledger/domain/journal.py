"""Journal engine: validates drafts and posts them atomically."""

import uuid
from collections import defaultdict
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from microledger.database.base import Database
from microledger.domain.entities import (
    JournalDraft,
    JournalLine,
    ReturnRecord,
    TaxSettlement,
    Transaction,
    TransactionType,
)
from microledger.domain.errors import (
    InsufficientLinesError,
    MalformedLineError,
    NotFoundError,
    UnbalancedEntryError,
    UnknownAccountError,
    ValidationError,
)
from microledger.domain.money import ZERO, has_cent_precision, is_balanced
from microledger.domain.period import PeriodGuard
from microledger.logging_config import get_logger

logger = get_logger("journal")


def generate_reference(prefix: str, entry_date: date) -> str:
    """Build a reference such as ``JE-20250314-1a2b3c4d``."""
    return f"{prefix}-{entry_date:%Y%m%d}-{uuid.uuid4().hex[:8]}"


def _as_amount(value) -> Optional[Decimal]:
    """Return a line amount as a Decimal, or None for unsupported types.

    Integers are exact and accepted; floats and bools are not.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    return None


def _check_line(index: int, line: JournalLine) -> Optional[MalformedLineError]:
    debit, credit = _as_amount(line.debit), _as_amount(line.credit)
    if debit is None or credit is None:
        return MalformedLineError(index, "amounts must be decimals or integers")
    if debit.is_nan() or credit.is_nan() or debit.is_infinite() or credit.is_infinite():
        return MalformedLineError(index, "amounts must be finite")
    if debit < 0 or credit < 0:
        return MalformedLineError(index, "debit and credit must not be negative")
    if debit > 0 and credit > 0:
        return MalformedLineError(index, "a line cannot carry both a debit and a credit")
    if debit == 0 and credit == 0:
        return MalformedLineError(index, "a line needs either a debit or a credit")
    if not has_cent_precision(debit) or not has_cent_precision(credit):
        return MalformedLineError(index, "amounts must be whole cents")
    return None


def _normalize_line(line: JournalLine, description: str) -> JournalLine:
    """Fill a missing line description and turn integer amounts into Decimals."""
    changes = {}
    if not line.description:
        changes["description"] = description
    for side in ("debit", "credit"):
        value = getattr(line, side)
        if isinstance(value, int) and not isinstance(value, bool):
            changes[side] = Decimal(value)
    return replace(line, **changes) if changes else line


class JournalService:
    """Service for validating, posting and browsing journal entries."""

    def __init__(self, db: Database, period_guard: PeriodGuard):
        """Initialize journal service.

        Args:
            db: Database instance
            period_guard: Guard consulted before every post
        """
        self.db = db
        self.period_guard = period_guard

    def normalize(self, draft: JournalDraft, reference_prefix: str = "JE") -> JournalDraft:
        """Fill in the default date, reference and line descriptions; integer amounts become Decimals."""
        entry_date = draft.date or date.today()
        reference = draft.reference or generate_reference(reference_prefix, entry_date)
        description = draft.description or ""
        lines = tuple(_normalize_line(line, description) for line in draft.lines)
        return replace(
            draft,
            date=entry_date,
            reference=reference,
            description=description,
            lines=lines,
        )

    def validate_entry(self, draft: JournalDraft) -> Optional[ValidationError]:
        """Validate a draft without posting it.

        Checks run in order: accounting period, unknown accounts, malformed
        lines, balance, then line/account count. The first failure wins.

        Args:
            draft: Journal draft to validate

        Returns:
            The first validation error, or None if the draft can be posted
        """
        entry_date = draft.date or date.today()
        period_error = self.period_guard.error_for(entry_date)
        if period_error is not None:
            return period_error

        unknown = []
        for line in draft.lines:
            if line.account_code not in unknown and self.db.get_account(line.account_code) is None:
                unknown.append(line.account_code)
        if unknown:
            return UnknownAccountError(unknown)

        for index, line in enumerate(draft.lines):
            line_error = _check_line(index, line)
            if line_error is not None:
                return line_error

        if not is_balanced(draft.difference):
            return UnbalancedEntryError(draft.total_debit, draft.total_credit)

        account_count = len({line.account_code for line in draft.lines})
        if len(draft.lines) < 2 or account_count < 2:
            return InsufficientLinesError(len(draft.lines), account_count)

        return None

    def post_journal_entry(
        self,
        draft: JournalDraft,
        *,
        tax_settlement: Optional[TaxSettlement] = None,
        return_record: Optional[ReturnRecord] = None,
        reference_prefix: str = "JE",
    ) -> Transaction:
        """Validate and post a journal entry.

        The transaction, every account-balance update and the optional
        satellite record are written in one storage transaction.

        Args:
            draft: Journal draft to post
            tax_settlement: Optional settlement record stored with the entry
            return_record: Optional return record stored with the entry
            reference_prefix: Prefix for a generated reference

        Returns:
            The posted transaction

        Raises:
            ValidationError: The first validation failure (see validate_entry)
            StorageError: If the store fails; nothing is written
        """
        draft = self.normalize(draft, reference_prefix)
        error = self.validate_entry(draft)
        if error is not None:
            logger.warning(
                "Journal entry rejected",
                extra={"error_code": error.code, "reference": draft.reference},
            )
            raise error

        balance_deltas: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for line in draft.lines:
            balance_deltas[line.account_code] += line.net

        if tax_settlement is not None:
            tax_settlement = replace(
                tax_settlement, date=draft.date, reference=draft.reference
            )
        if return_record is not None:
            return_record = replace(return_record, date=draft.date)

        transaction = self.db.post_transaction(
            date=draft.date,
            transaction_type=draft.transaction_type,
            reference=draft.reference,
            description=draft.description,
            entries=draft.lines,
            balance_deltas=dict(balance_deltas),
            tax_settlement=tax_settlement,
            return_record=return_record,
            party=draft.party,
        )
        logger.info(
            "Journal entry posted",
            extra={
                "transaction_id": transaction.id,
                "transaction_type": transaction.transaction_type.value,
                "reference": transaction.reference,
                "line_count": len(transaction.entries),
            },
        )
        return transaction

    def list_journals(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
        party: Optional[str] = None,
    ) -> list[Transaction]:
        """List posted entries ordered by date, then id."""
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            transaction_type=transaction_type,
            party=party,
        )

    def get_journal(self, transaction_id: int) -> Transaction:
        """Get a posted entry.

        Raises:
            NotFoundError: If no transaction has this id
        """
        transaction = self.db.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return transaction

    def recent_journals(self, limit: int = 5) -> list[Transaction]:
        """Return the most recent entries, newest first."""
        transactions = self.db.list_transactions()
        return list(reversed(transactions))[:limit]
