"""Tests for ledgers, trial balance and tax reports."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from microledger.database.models import (
    Account as ORMAccount,
    JournalLine as ORMJournalLine,
    Transaction as ORMTransaction,
)
from microledger.domain.entities import JournalDraft, JournalLine, PartyKind, TaxStatus
from microledger.domain.errors import AccountNotFoundError, ValidationError


def _post(journal_service, entry_date, debit_code, credit_code, amount, description=""):
    value = Decimal(amount)
    return journal_service.post_journal_entry(
        JournalDraft(
            lines=(
                JournalLine.debit_line(debit_code, value),
                JournalLine.credit_line(credit_code, value),
            ),
            date=entry_date,
            description=description,
        )
    )


@pytest.fixture
def activity(journal_service, account_service):
    """A small set of postings across the first quarter."""
    account_service.create_account("1090", "Till float", "asset", parent_code="1000", opening_balance="100")
    account_service.create_account("3070", "Owner float", "equity", parent_code="3000", opening_balance="-100")
    _post(journal_service, date(2025, 1, 10), "1010", "3010", "5000", "Capital")
    _post(journal_service, date(2025, 2, 1), "5040", "1010", "800", "Rent")
    _post(journal_service, date(2025, 2, 15), "1010", "4010", "1200", "Sales")
    _post(journal_service, date(2025, 3, 1), "1020", "1010", "1000", "Deposit")


def _insert_unbalanced(temp_db):
    session = temp_db._get_session()
    txn = ORMTransaction(
        date=date(2025, 4, 1), transaction_type="manual", reference="BAD-1", description="Broken"
    )
    txn.lines.append(
        ORMJournalLine(position=0, account_code="1010", debit=Decimal("10"), credit=Decimal("0"))
    )
    txn.lines.append(
        ORMJournalLine(position=1, account_code="4010", debit=Decimal("0"), credit=Decimal("5"))
    )
    session.add(txn)
    session.commit()
    return txn.id


class TestLedger:
    def test_ledger_matches_cached_balance(self, reporting_service, temp_db, activity):
        """Replaying every line ends on the cached balance."""
        for code in ("1010", "1020", "3010", "4010", "5040", "1090"):
            ledger = reporting_service.get_ledger(code)
            assert ledger.closing_balance == temp_db.get_account(code).balance

    def test_running_balance(self, reporting_service, activity):
        ledger = reporting_service.get_ledger("1010")

        assert ledger.opening_balance == Decimal("0.00")
        assert [row.running_balance for row in ledger.rows] == [
            Decimal("5000.00"),
            Decimal("4200.00"),
            Decimal("5400.00"),
            Decimal("4400.00"),
        ]
        assert [row.description for row in ledger.rows] == ["Capital", "Rent", "Sales", "Deposit"]
        assert ledger.total_debit == Decimal("6200.00")
        assert ledger.total_credit == Decimal("1800.00")

    def test_date_range_brings_balance_forward(self, reporting_service, activity):
        ledger = reporting_service.get_ledger(
            "1010", start_date=date(2025, 2, 1), end_date=date(2025, 2, 28)
        )

        assert ledger.opening_balance == Decimal("5000.00")
        assert len(ledger.rows) == 2
        assert ledger.closing_balance == Decimal("5400.00")

    def test_same_day_entries_keep_posting_order(self, reporting_service, journal_service):
        day = date(2025, 5, 5)
        first = _post(journal_service, day, "1010", "4010", "10")
        second = _post(journal_service, day, "5020", "1010", "3")

        ledger = reporting_service.get_ledger("1010")
        assert [row.transaction_id for row in ledger.rows] == [first.id, second.id]

    def test_errors(self, reporting_service):
        with pytest.raises(AccountNotFoundError):
            reporting_service.get_ledger("9999")
        with pytest.raises(ValidationError):
            reporting_service.get_ledger(
                "1010", start_date=date(2025, 2, 1), end_date=date(2025, 1, 1)
            )


class TestTrialBalance:
    def test_closure(self, reporting_service, activity):
        trial_balance = reporting_service.get_trial_balance(as_of=date(2025, 12, 31))
        totals = trial_balance.totals

        assert trial_balance.is_balanced
        assert totals.opening_debit == totals.opening_credit == Decimal("100.00")
        assert totals.movement_debit == totals.movement_credit == Decimal("8000.00")
        assert totals.closing_debit == totals.closing_credit

    def test_rows_skip_idle_accounts(self, reporting_service, activity):
        trial_balance = reporting_service.get_trial_balance(as_of=date(2025, 12, 31))
        codes = [row.account_code for row in trial_balance.rows]

        assert codes == ["1010", "1020", "1090", "3010", "3070", "4010", "5040"]
        cash = trial_balance.rows[0]
        assert cash.movement_debit == Decimal("6200.00")
        assert cash.closing_debit == Decimal("4400.00")
        assert cash.closing_credit == Decimal("0.00")

    def test_cutoff_date(self, reporting_service, activity):
        trial_balance = reporting_service.get_trial_balance(as_of=date(2025, 1, 31))
        assert trial_balance.totals.movement_debit == Decimal("5000.00")
        assert trial_balance.is_balanced

    def test_unbalanced_transaction_is_flagged(self, reporting_service, temp_db, activity, caplog):
        bad_id = _insert_unbalanced(temp_db)

        with caplog.at_level(logging.WARNING, logger="microledger.reporting"):
            trial_balance = reporting_service.get_trial_balance(as_of=date(2025, 12, 31))
            unbalanced = reporting_service.find_unbalanced_transactions()

        assert not trial_balance.is_balanced
        assert not trial_balance.totals.movement_balanced
        assert [txn.id for txn in unbalanced] == [bad_id]
        assert any(r.getMessage() == "Trial balance does not balance" for r in caplog.records)


class TestTaxFigures:
    def test_tax_position(self, reporting_service, template_service):
        day = date(2025, 6, 1)
        template_service.post_pos_sale("1000", tax_rate="15", entry_date=day)
        template_service.post_purchase("400", tax_rate="15", entry_date=day)

        position = reporting_service.get_tax_position()
        assert position.output_balance == Decimal("150.00")
        assert position.input_balance == Decimal("60.00")
        assert position.net == Decimal("90.00")
        assert position.status is TaxStatus.PAYABLE

    def test_empty_position_is_settled(self, reporting_service):
        assert reporting_service.get_tax_position().status is TaxStatus.SETTLED

    def test_tax_report_by_transaction_type(self, reporting_service, template_service):
        template_service.post_pos_sale("1000", tax_rate="15", entry_date=date(2025, 6, 1))
        template_service.post_sales_return("200", tax_rate="15", entry_date=date(2025, 6, 2))
        template_service.post_purchase("400", tax_rate="15", entry_date=date(2025, 6, 3))
        template_service.post_purchase_return("100", tax_rate="15", entry_date=date(2025, 6, 4))
        template_service.post_pos_sale("500", tax_rate="15", entry_date=date(2025, 8, 1))

        report = reporting_service.get_tax_report(date(2025, 6, 1), date(2025, 6, 30))
        assert report.output_tax == Decimal("120.00")
        assert report.input_tax == Decimal("45.00")
        assert report.net_tax == Decimal("75.00")

        with pytest.raises(ValidationError):
            reporting_service.get_tax_report(date(2025, 7, 1), date(2025, 6, 1))


class TestPartyBalances:
    @pytest.fixture
    def trade(self, template_service):
        """Credit trade with two customers and one supplier, plus untagged activity."""
        post = template_service.post_quick_template
        post("pos_sale", subtotal="400", method="credit", party="Acme", entry_date=date(2025, 3, 1))
        post("pos_sale", subtotal="100", method="credit", party="Beta", entry_date=date(2025, 3, 2))
        post("pos_sale", subtotal="60", method="cash", party="Walk-in", entry_date=date(2025, 3, 2))
        post("pos_sale", subtotal="70", method="credit", entry_date=date(2025, 3, 3))
        post("customer_collection", amount="150", party="Acme", entry_date=date(2025, 4, 1))
        post(
            "sales_return", amount="50", method="credit", party="Acme", entry_date=date(2025, 4, 2)
        )
        post("purchase", subtotal="300", party="Supply Ltd", entry_date=date(2025, 3, 5))
        post("supplier_payment", amount="120", party="Supply Ltd", entry_date=date(2025, 4, 5))
        post("purchase_return", amount="30", party="Supply Ltd", entry_date=date(2025, 4, 6))

    def test_customer_balances(self, reporting_service, trade):
        """Credit sales charge a customer; collections and credit returns settle."""
        acme, beta = reporting_service.get_party_balances(PartyKind.CUSTOMER)

        assert (acme.party, acme.charged, acme.settled, acme.balance) == (
            "Acme",
            Decimal("400.00"),
            Decimal("200.00"),
            Decimal("200.00"),
        )
        assert acme.transaction_count == 3
        assert (beta.party, beta.balance) == ("Beta", Decimal("100.00"))

    def test_supplier_balances(self, reporting_service, trade):
        [supplier] = reporting_service.get_party_balances("supplier")

        assert supplier.party == "Supply Ltd"
        assert supplier.kind is PartyKind.SUPPLIER
        assert supplier.charged == Decimal("300.00")
        assert supplier.settled == Decimal("150.00")
        assert supplier.balance == Decimal("150.00")

    def test_cutoff_date(self, reporting_service, trade):
        [acme, _] = reporting_service.get_party_balances(PartyKind.CUSTOMER, as_of=date(2025, 3, 31))
        assert acme.balance == Decimal("400.00")

    def test_party_totals_stay_within_control_account(self, reporting_service, temp_db, trade):
        """Tagged balances plus untagged credit sales make up the receivable balance."""
        customers = reporting_service.get_party_balances(PartyKind.CUSTOMER)
        tagged = sum(entry.balance for entry in customers)
        assert tagged + Decimal("70.00") == temp_db.get_account("1040").balance

    def test_no_parties(self, reporting_service):
        assert reporting_service.get_party_balances(PartyKind.SUPPLIER) == []

class TestGroupsAndReconciliation:
    def test_group_totals(self, reporting_service, activity):
        groups = reporting_service.get_account_group_totals(as_of=date(2025, 12, 31))

        assert groups.assets == Decimal("5500.00")
        assert groups.equity == Decimal("5100.00")
        assert groups.revenue == Decimal("1200.00")
        assert groups.expense == Decimal("800.00")
        assert groups.net_profit == Decimal("400.00")

    def test_reconcile_consistent(self, reporting_service, activity):
        result = reporting_service.reconcile("1010")
        assert result.is_consistent
        assert result.movement_count == 4
        assert all(r.is_consistent for r in reporting_service.reconcile_all())

    def test_reconcile_detects_drift(self, reporting_service, temp_db, activity):
        session = temp_db._get_session()
        session.get(ORMAccount, "1020").balance = Decimal("999")
        session.commit()

        result = reporting_service.reconcile("1020")
        assert not result.is_consistent
        assert result.replayed_balance == Decimal("1000.00")
        assert result.difference == Decimal("-1.00")
        assert [r.account_code for r in reporting_service.reconcile_all() if not r.is_consistent] == [
            "1020"
        ]

    def test_reconcile_missing_account(self, reporting_service):
        with pytest.raises(AccountNotFoundError):
            reporting_service.reconcile("9999")
