"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic and validates stored values at the
storage boundary: account and transaction types are parsed into their enums
and amounts are normalised to cents.
"""

from microledger.domain import entities as domain
from microledger.domain.money import to_money
from microledger.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
    JournalLine as ORMJournalLine,
    TaxSettlement as ORMTaxSettlement,
    ReturnRecord as ORMReturnRecord,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        code=orm_account.code,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        parent_code=orm_account.parent_code,
        opening_balance=to_money(orm_account.opening_balance),
        balance=to_money(orm_account.balance),
        description=orm_account.description,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def journal_line_to_domain(orm_line: ORMJournalLine) -> domain.JournalLine:
    """Convert SQLAlchemy JournalLine model to domain JournalLine entity."""
    return domain.JournalLine(
        account_code=orm_line.account_code,
        debit=to_money(orm_line.debit),
        credit=to_money(orm_line.credit),
        description=orm_line.description,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model (with lines) to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        reference=orm_transaction.reference,
        description=orm_transaction.description or "",
        entries=tuple(journal_line_to_domain(line) for line in orm_transaction.lines),
        party=orm_transaction.party,
        created_at=orm_transaction.created_at,
    )


def tax_settlement_to_domain(orm_settlement: ORMTaxSettlement) -> domain.TaxSettlement:
    """Convert SQLAlchemy TaxSettlement model to domain TaxSettlement entity."""
    return domain.TaxSettlement(
        id=orm_settlement.id,
        transaction_id=orm_settlement.transaction_id,
        date=orm_settlement.date,
        amount=to_money(orm_settlement.amount),
        method=domain.PaymentMethod(orm_settlement.method),
        kind=orm_settlement.kind,
        reference=orm_settlement.reference,
        notes=orm_settlement.notes,
        created_at=orm_settlement.created_at,
    )


def return_record_to_domain(orm_record: ORMReturnRecord) -> domain.ReturnRecord:
    """Convert SQLAlchemy ReturnRecord model to domain ReturnRecord entity."""
    return domain.ReturnRecord(
        id=orm_record.id,
        transaction_id=orm_record.transaction_id,
        kind=orm_record.kind,
        date=orm_record.date,
        amount=to_money(orm_record.amount),
        tax_amount=to_money(orm_record.tax_amount),
        party=orm_record.party,
        invoice_reference=orm_record.invoice_reference,
        reason=orm_record.reason,
        details=orm_record.details,
        created_at=orm_record.created_at,
    )
