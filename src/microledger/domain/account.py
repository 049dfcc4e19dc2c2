"""Chart of accounts domain service."""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from microledger.database.base import Database
from microledger.domain.chart import DEFAULT_CHART
from microledger.domain.entities import Account as AccountEntity, AccountType
from microledger.domain.errors import (
    AccountNotFoundError,
    DuplicateCodeError,
    HasChildAccountsError,
    HasTransactionsError,
    InvalidAccountTypeError,
    InvalidParentError,
    ValidationError,
)
from microledger.domain.money import to_money
from microledger.logging_config import get_logger

logger = get_logger("accounts")


def parse_account_type(value) -> AccountType:
    """Parse an account type name, raising InvalidAccountTypeError if unknown."""
    if isinstance(value, AccountType):
        return value
    try:
        return AccountType(str(value).strip().lower())
    except ValueError:
        raise InvalidAccountTypeError(value) from None


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        code: str,
        name: str,
        account_type,
        parent_code: Optional[str] = None,
        opening_balance=Decimal("0"),
        description: Optional[str] = None,
    ) -> AccountEntity:
        """Create a new account.

        Args:
            code: Unique account code
            name: Display name
            account_type: One of the five account kinds (enum or name)
            parent_code: Optional parent account code, must be the same type
            opening_balance: Signed balance brought forward (debit positive)
            description: Optional description

        Returns:
            The created account

        Raises:
            DuplicateCodeError: If code already exists
            InvalidAccountTypeError: If account_type is not one of the five kinds
            InvalidParentError: If parent is missing, itself, or of another type
        """
        code = (code or "").strip()
        if not code:
            raise ValidationError("Account code must not be empty")
        if not (name or "").strip():
            raise ValidationError("Account name must not be empty")

        acc_type = parse_account_type(account_type)

        if self.db.get_account(code) is not None:
            raise DuplicateCodeError(code)

        if parent_code is not None:
            if parent_code == code:
                raise InvalidParentError(code, parent_code, "an account cannot be its own parent")
            parent = self.db.get_account(parent_code)
            if parent is None:
                raise InvalidParentError(code, parent_code, "parent account does not exist")
            if parent.account_type != acc_type:
                raise InvalidParentError(
                    code,
                    parent_code,
                    f"parent is {parent.account_type.value}, account is {acc_type.value}",
                )

        try:
            opening = to_money(opening_balance)
        except InvalidOperation:
            raise ValidationError(f"Invalid opening balance: {opening_balance}") from None

        account = self.db.create_account(
            code=code,
            name=name.strip(),
            account_type=acc_type,
            parent_code=parent_code,
            opening_balance=opening,
            description=description,
        )
        logger.info(
            "Account created",
            extra={"account_code": code, "account_type": acc_type.value},
        )
        return account

    def get_account(self, code: str) -> Optional[AccountEntity]:
        """Get account by code.

        Args:
            code: Account code

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(code)

    def require_account(self, code: str) -> AccountEntity:
        """Get account by code, raising AccountNotFoundError if missing."""
        account = self.db.get_account(code)
        if account is None:
            raise AccountNotFoundError(code)
        return account

    def list_accounts(
        self, account_type=None, parent_code: Optional[str] = None
    ) -> list[AccountEntity]:
        """List accounts ordered by code.

        Args:
            account_type: Optional account type filter
            parent_code: Optional parent filter (direct children only)

        Returns:
            List of account entities
        """
        acc_type = parse_account_type(account_type) if account_type is not None else None
        return self.db.list_accounts(account_type=acc_type, parent_code=parent_code)

    def account_type(self, code: str) -> AccountType:
        """Return the type of an account.

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        return self.require_account(code).account_type

    def update_account_details(
        self, code: str, name: Optional[str] = None, description: Optional[str] = None
    ) -> AccountEntity:
        """Rename an account or change its description.

        Type, parent and opening balance are fixed at creation.

        Raises:
            AccountNotFoundError: If the account does not exist
            ValidationError: If name is given but empty
        """
        self.require_account(code)
        if name is not None and not name.strip():
            raise ValidationError("Account name must not be empty")
        return self.db.update_account_details(
            code, name=name.strip() if name is not None else None, description=description
        )

    def get_account_tree(self) -> list[dict[str, Any]]:
        """Get the full chart as nested dicts with a ``children`` list."""
        accounts = self.db.list_accounts()
        codes = {acc.code for acc in accounts}

        def build_tree(parent_code: Optional[str]) -> list[dict[str, Any]]:
            result = []
            for acc in accounts:
                # Orphans whose parent vanished are shown as roots
                parent = acc.parent_code if acc.parent_code in codes else None
                if parent == parent_code:
                    result.append({"account": acc, "children": build_tree(acc.code)})
            return result

        return build_tree(None)

    def seed_default_chart(self) -> list[AccountEntity]:
        """Create the standard chart of accounts, skipping existing codes.

        Returns:
            The accounts that were created
        """
        created = []
        for code, name, acc_type, parent_code in DEFAULT_CHART:
            if self.db.get_account(code) is not None:
                continue
            if parent_code is not None and self.db.get_account(parent_code) is None:
                parent_code = None
            created.append(
                self.create_account(code=code, name=name, account_type=acc_type, parent_code=parent_code)
            )
        return created

    def delete_account(self, code: str) -> None:
        """Delete an account.

        Every stored transaction is scanned for lines referencing the code.

        Args:
            code: Account code to delete

        Raises:
            AccountNotFoundError: If the account does not exist
            HasTransactionsError: If any journal line references the account
            HasChildAccountsError: If other accounts name it as parent
        """
        self.require_account(code)

        referencing = sum(
            1
            for txn in self.db.list_transactions()
            if any(line.account_code == code for line in txn.entries)
        )
        if referencing:
            raise HasTransactionsError(code, referencing)

        children = self.db.list_accounts(parent_code=code)
        if children:
            raise HasChildAccountsError(code, [child.code for child in children])

        self.db.delete_account(code)
        logger.info("Account deleted", extra={"account_code": code})
