"""Reporting engine: ledgers, trial balance and tax figures replayed from the journal.

Nothing here reads the cached ``Account.balance`` except ``reconcile``,
which compares it against a full replay.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

from microledger.database.base import Database
from microledger.domain.chart import DEFAULT_POSTING_ACCOUNTS, PostingAccounts
from microledger.domain.entities import (
    AccountGroupTotals,
    AccountLedger,
    AccountType,
    LedgerRow,
    PartyBalance,
    PartyKind,
    ReconciliationResult,
    TaxPosition,
    TaxReport,
    TaxStatus,
    Transaction,
    TransactionType,
    TrialBalance,
    TrialBalanceRow,
    TrialBalanceTotals,
)
from microledger.domain.errors import AccountNotFoundError, ValidationError
from microledger.domain.money import ZERO, is_balanced, money_sum, split_balance
from microledger.logging_config import get_logger

logger = get_logger("reporting")


class ReportingService:
    """Service computing reports from the full transaction history."""

    def __init__(self, db: Database, accounts: PostingAccounts = DEFAULT_POSTING_ACCOUNTS):
        """Initialize reporting service.

        Args:
            db: Database instance
            accounts: Posting account codes (the tax accounts are read from here)
        """
        self.db = db
        self.accounts = accounts

    def _movements(self, as_of: Optional[date] = None) -> dict[str, tuple[Decimal, Decimal]]:
        """Sum (debit, credit) per account over transactions dated on or before as_of."""
        debits: dict[str, Decimal] = defaultdict(lambda: ZERO)
        credits: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in self.db.list_transactions(end_date=as_of):
            for line in txn.entries:
                debits[line.account_code] += line.debit
                credits[line.account_code] += line.credit
        codes = set(debits) | set(credits)
        return {code: (debits[code], credits[code]) for code in codes}

    def replayed_balances(self, as_of: Optional[date] = None) -> dict[str, Decimal]:
        """Return opening balance plus replayed movements for every account."""
        movements = self._movements(as_of)
        balances = {}
        for account in self.db.list_accounts():
            debit, credit = movements.get(account.code, (ZERO, ZERO))
            balances[account.code] = account.opening_balance + debit - credit
        return balances

    def get_ledger(
        self,
        account_code: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AccountLedger:
        """Build the general ledger for one account.

        Lines are replayed in (date, id) order. With a start date, movements
        before it are folded into the opening figure as balance brought forward.

        Args:
            account_code: Account code
            start_date: Optional first date to list (inclusive)
            end_date: Optional last date to list (inclusive)

        Returns:
            AccountLedger with running balances

        Raises:
            AccountNotFoundError: If the account does not exist
            ValidationError: If start_date is after end_date
        """
        account = self.db.get_account(account_code)
        if account is None:
            raise AccountNotFoundError(account_code)
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")

        opening = account.opening_balance
        running = opening
        rows = []
        for txn in self.db.list_transactions(end_date=end_date, account_code=account_code):
            for line in txn.lines_for(account_code):
                running += line.debit - line.credit
                if start_date is not None and txn.date < start_date:
                    opening = running
                    continue
                rows.append(
                    LedgerRow(
                        transaction_id=txn.id,
                        date=txn.date,
                        reference=txn.reference,
                        description=line.description or txn.description,
                        debit=line.debit,
                        credit=line.credit,
                        running_balance=running,
                    )
                )

        return AccountLedger(
            account=account,
            start_date=start_date,
            end_date=end_date,
            opening_balance=opening,
            rows=tuple(rows),
        )

    def get_trial_balance(self, as_of: Optional[date] = None) -> TrialBalance:
        """Compute opening, movement and closing columns as of a cutoff date.

        Args:
            as_of: Cutoff date (inclusive); defaults to today

        Returns:
            TrialBalance; rows with no opening balance and no movement are omitted
        """
        as_of = as_of or date.today()
        movements = self._movements(as_of)
        rows = []
        totals = defaultdict(lambda: ZERO)

        for account in self.db.list_accounts():
            movement_debit, movement_credit = movements.get(account.code, (ZERO, ZERO))
            opening_debit, opening_credit = split_balance(account.opening_balance)
            closing_debit, closing_credit = split_balance(
                account.opening_balance + movement_debit - movement_credit
            )
            row = TrialBalanceRow(
                account_code=account.code,
                account_name=account.name,
                account_type=account.account_type,
                opening_debit=opening_debit,
                opening_credit=opening_credit,
                movement_debit=movement_debit,
                movement_credit=movement_credit,
                closing_debit=closing_debit,
                closing_credit=closing_credit,
            )
            for column in (
                "opening_debit",
                "opening_credit",
                "movement_debit",
                "movement_credit",
                "closing_debit",
                "closing_credit",
            ):
                totals[column] += getattr(row, column)
            if row.has_activity:
                rows.append(row)

        trial_balance = TrialBalance(
            as_of=as_of, rows=tuple(rows), totals=TrialBalanceTotals(**totals)
        )
        if not trial_balance.is_balanced:
            logger.warning(
                "Trial balance does not balance",
                extra={
                    "as_of": as_of,
                    "closing_debit": trial_balance.totals.closing_debit,
                    "closing_credit": trial_balance.totals.closing_credit,
                },
            )
        return trial_balance

    def get_tax_position(self, as_of: Optional[date] = None) -> TaxPosition:
        """Compare output tax owed with input tax recoverable.

        Both figures are replayed balances on the accounts' normal sides.
        A positive net is payable, a negative net is receivable.
        """
        balances = self.replayed_balances(as_of)
        output_balance = -balances.get(self.accounts.output_tax, ZERO)
        input_balance = balances.get(self.accounts.input_tax, ZERO)
        net = output_balance - input_balance

        if is_balanced(net):
            status = TaxStatus.SETTLED
        elif net > 0:
            status = TaxStatus.PAYABLE
        else:
            status = TaxStatus.RECEIVABLE
        return TaxPosition(
            output_balance=output_balance,
            input_balance=input_balance,
            net=net,
            status=status,
        )

    def get_tax_report(self, start_date: date, end_date: date) -> TaxReport:
        """Summarise tax charged on sales and paid on purchases in a date range.

        Output tax counts credits to the output-tax account from sales less
        debits from sales returns; input tax counts debits to the input-tax
        account from purchases less credits from purchase returns.
        """
        if start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")

        output_tax = ZERO
        input_tax = ZERO
        for txn in self.db.list_transactions(start_date=start_date, end_date=end_date):
            output_lines = txn.lines_for(self.accounts.output_tax)
            input_lines = txn.lines_for(self.accounts.input_tax)
            if txn.transaction_type is TransactionType.SALE:
                output_tax += money_sum(line.credit for line in output_lines)
            elif txn.transaction_type is TransactionType.SALES_RETURN:
                output_tax -= money_sum(line.debit for line in output_lines)
            elif txn.transaction_type is TransactionType.PURCHASE:
                input_tax += money_sum(line.debit for line in input_lines)
            elif txn.transaction_type is TransactionType.PURCHASE_RETURN:
                input_tax -= money_sum(line.credit for line in input_lines)

        return TaxReport(
            start_date=start_date,
            end_date=end_date,
            output_tax=output_tax,
            input_tax=input_tax,
        )

    def get_account_group_totals(self, as_of: Optional[date] = None) -> AccountGroupTotals:
        """Total replayed balances per account type, each on its normal side."""
        as_of = as_of or date.today()
        balances = self.replayed_balances(as_of)
        groups: dict[AccountType, Decimal] = defaultdict(lambda: ZERO)
        for account in self.db.list_accounts():
            balance = balances[account.code]
            groups[account.account_type] += (
                balance if account.account_type.is_debit_normal else -balance
            )
        return AccountGroupTotals(
            as_of=as_of,
            assets=groups[AccountType.ASSET],
            liabilities=groups[AccountType.LIABILITY],
            equity=groups[AccountType.EQUITY],
            revenue=groups[AccountType.REVENUE],
            expense=groups[AccountType.EXPENSE],
        )

    def get_party_balances(
        self, kind: PartyKind, as_of: Optional[date] = None
    ) -> list[PartyBalance]:
        """Replay open balances per customer or supplier.

        Customers are read from receivable lines and suppliers from payable
        lines of transactions tagged with a party. Untagged postings to the
        control accounts are not attributed to anyone.

        Args:
            kind: PartyKind (or its value)
            as_of: Only count transactions dated on or before this date

        Returns:
            One balance per party that touched the control account, by name
        """
        kind = PartyKind(kind)
        if kind is PartyKind.CUSTOMER:
            control = self.accounts.receivable
        else:
            control = self.accounts.payable

        charged: dict[str, Decimal] = defaultdict(lambda: ZERO)
        settled: dict[str, Decimal] = defaultdict(lambda: ZERO)
        counts: dict[str, int] = defaultdict(int)
        for txn in self.db.list_transactions(end_date=as_of, account_code=control):
            if txn.party is None:
                continue
            for line in txn.lines_for(control):
                if kind is PartyKind.CUSTOMER:
                    charged[txn.party] += line.debit
                    settled[txn.party] += line.credit
                else:
                    charged[txn.party] += line.credit
                    settled[txn.party] += line.debit
            counts[txn.party] += 1

        return [
            PartyBalance(
                party=party,
                kind=kind,
                charged=charged[party],
                settled=settled[party],
                transaction_count=counts[party],
            )
            for party in sorted(counts)
        ]

    def reconcile(self, account_code: str) -> ReconciliationResult:
        """Compare an account's cached balance with a full replay of its lines.

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        account = self.db.get_account(account_code)
        if account is None:
            raise AccountNotFoundError(account_code)

        replayed = account.opening_balance
        count = 0
        for txn in self.db.list_transactions(account_code=account_code):
            for line in txn.lines_for(account_code):
                replayed += line.debit - line.credit
                count += 1

        result = ReconciliationResult(
            account_code=account_code,
            cached_balance=account.balance,
            replayed_balance=replayed,
            movement_count=count,
        )
        if not result.is_consistent:
            logger.warning(
                "Cached balance differs from journal replay",
                extra={
                    "account_code": account_code,
                    "cached_balance": result.cached_balance,
                    "replayed_balance": result.replayed_balance,
                },
            )
        return result

    def reconcile_all(self) -> list[ReconciliationResult]:
        """Reconcile every account."""
        return [self.reconcile(account.code) for account in self.db.list_accounts()]

    def find_unbalanced_transactions(self) -> list[Transaction]:
        """List stored transactions whose lines do not balance."""
        unbalanced = [
            txn
            for txn in self.db.list_transactions()
            if not is_balanced(txn.total_debit - txn.total_credit)
        ]
        for txn in unbalanced:
            logger.warning(
                "Unbalanced transaction in store",
                extra={
                    "transaction_id": txn.id,
                    "total_debit": txn.total_debit,
                    "total_credit": txn.total_credit,
                },
            )
        return unbalanced
