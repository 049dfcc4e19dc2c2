"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Mapping, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from microledger.domain.entities import (
    Account,
    AccountType,
    JournalLine,
    Transaction,
    TransactionType,
    TaxSettlement,
    ReturnRecord,
)


class Database(ABC):
    """Abstract ledger store for microledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType,
        parent_code: Optional[str] = None,
        opening_balance: Decimal = Decimal("0"),
        description: Optional[str] = None,
    ) -> Account:
        """Create a new account with balance equal to its opening balance."""
        pass

    @abstractmethod
    def get_account(self, code: str) -> Optional[Account]:
        """Get account by code."""
        pass

    @abstractmethod
    def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        parent_code: Optional[str] = None,
    ) -> list[Account]:
        """List accounts ordered by code, optionally filtered."""
        pass

    @abstractmethod
    def update_account_details(
        self, code: str, name: Optional[str] = None, description: Optional[str] = None
    ) -> Account:
        """Update display fields of an account."""
        pass

    @abstractmethod
    def delete_account(self, code: str) -> None:
        """Delete an account record."""
        pass

    # Transaction operations
    @abstractmethod
    def post_transaction(
        self,
        date: date,
        transaction_type: TransactionType,
        reference: str,
        description: str,
        entries: Sequence[JournalLine],
        balance_deltas: Mapping[str, Decimal],
        tax_settlement: Optional[TaxSettlement] = None,
        return_record: Optional[ReturnRecord] = None,
        party: Optional[str] = None,
    ) -> Transaction:
        """Store a transaction, apply balance deltas and write any satellite record.

        All writes happen in one database transaction; on failure nothing is
        persisted and StorageError is raised.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
        account_code: Optional[str] = None,
        party: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions ordered by (date, id), with optional filters."""
        pass

    # Satellite records
    @abstractmethod
    def list_tax_settlements(self) -> list[TaxSettlement]:
        """List tax settlement records, newest first."""
        pass

    @abstractmethod
    def list_return_records(self, kind: Optional[str] = None) -> list[ReturnRecord]:
        """List return records, newest first."""
        pass

    # Settings
    @abstractmethod
    def get_setting(self, key: str) -> Optional[str]:
        """Get a stored setting document."""
        pass

    @abstractmethod
    def save_setting(self, key: str, value: str) -> None:
        """Insert or replace a setting document."""
        pass
