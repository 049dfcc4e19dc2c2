"""Tests for the canned posting templates."""

from datetime import date
from decimal import Decimal

import pytest

from microledger.domain.entities import PaymentMethod, TaxStatus, TransactionType
from microledger.domain.errors import (
    AmountExceedsNetTaxError,
    InvalidAmountError,
    ValidationError,
)
from microledger.domain.templates import (
    TemplateService,
    build_pos_sale,
    build_purchase,
    build_purchase_return,
    build_sales_return,
    build_tax_settlement,
    build_transfer,
)

DAY = date(2025, 6, 10)


def _lines(txn):
    return [(line.account_code, line.debit, line.credit) for line in txn.entries]


def _balance(temp_db, code):
    return temp_db.get_account(code).balance


class TestBuilders:
    """Pure builders always produce balanced drafts."""

    def test_pos_sale_with_discount_and_cost(self):
        draft = build_pos_sale(
            "200", tax_rate="10", discount="20", cost="80", method=PaymentMethod.BANK
        )
        lines = {(line.account_code, line.debit, line.credit) for line in draft.lines}

        assert ("1020", Decimal("198.00"), Decimal("0")) in lines
        assert ("4030", Decimal("20.00"), Decimal("0")) in lines
        assert ("4010", Decimal("0"), Decimal("200.00")) in lines
        assert ("2041", Decimal("0"), Decimal("18.00")) in lines
        assert ("5010", Decimal("80.00"), Decimal("0")) in lines
        assert ("1030", Decimal("0"), Decimal("80.00")) in lines
        assert draft.difference == 0
        assert draft.transaction_type is TransactionType.SALE

    def test_pos_sale_on_credit_uses_receivable(self):
        draft = build_pos_sale("50", method=PaymentMethod.CREDIT)
        assert [line.account_code for line in draft.lines] == ["1040", "4010"]

    def test_pos_sale_rejects_discount_over_subtotal(self):
        with pytest.raises(ValidationError):
            build_pos_sale("10", discount="11")

    def test_purchase_defaults_to_payable(self):
        draft = build_purchase("100", tax_rate="15", discount="10")
        lines = {(line.account_code, line.debit, line.credit) for line in draft.lines}

        assert ("1030", Decimal("100.00"), Decimal("0")) in lines
        assert ("1070", Decimal("13.50"), Decimal("0")) in lines
        assert ("4070", Decimal("0"), Decimal("10.00")) in lines
        assert ("2010", Decimal("0"), Decimal("103.50")) in lines
        assert draft.difference == 0

    def test_returns_mirror_sale_and_purchase(self):
        sales_return = build_sales_return("100", tax_rate="15", cost="60")
        assert sales_return.difference == 0
        assert {line.account_code for line in sales_return.lines} == {
            "4040",
            "2041",
            "1010",
            "1030",
            "5010",
        }

        purchase_return = build_purchase_return("100", tax_rate="15")
        assert purchase_return.difference == 0
        assert purchase_return.lines[0].account_code == "2010"
        assert purchase_return.lines[0].debit == Decimal("115.00")

    def test_tax_settlement_sides(self):
        payable = build_tax_settlement("40", TaxStatus.PAYABLE)
        assert [(line.account_code, line.debit) for line in payable.lines] == [
            ("2041", Decimal("40.00")),
            ("1020", Decimal("0")),
        ]
        receivable = build_tax_settlement("40", TaxStatus.RECEIVABLE, method=PaymentMethod.CASH)
        assert [(line.account_code, line.credit) for line in receivable.lines] == [
            ("1010", Decimal("0")),
            ("1070", Decimal("40.00")),
        ]
        with pytest.raises(ValidationError):
            build_tax_settlement("40", TaxStatus.SETTLED)

    def test_transfer_requires_distinct_accounts(self):
        with pytest.raises(ValidationError):
            build_transfer("10", "1010", "1010")

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_non_positive_amounts_rejected(self, amount):
        with pytest.raises(InvalidAmountError) as exc_info:
            build_transfer(amount, "1010", "1020")
        assert exc_info.value.code == "INVALID_AMOUNT"

    def test_unparsable_amount(self):
        with pytest.raises(ValidationError):
            build_transfer("ten", "1010", "1020")


class TestTemplateService:
    def test_quick_receipt(self, template_service, temp_db):
        """A receipt of 1000 debits cash and credits sales in two balanced lines."""
        txn = template_service.post_receipt("1000", entry_date=DAY)

        assert _lines(txn) == [
            ("1010", Decimal("1000.00"), Decimal("0")),
            ("4010", Decimal("0"), Decimal("1000.00")),
        ]
        assert txn.transaction_type is TransactionType.RECEIPT
        assert txn.reference.startswith("REC-20250610-")
        assert _balance(temp_db, "1010") == Decimal("1000.00")
        assert temp_db.get_account("4010").normal_balance == Decimal("1000.00")

    def test_pos_sale_with_tax(self, template_service, temp_db):
        """Subtotal 100 at 15% paid cash posts cash 115, sales 100, output tax 15."""
        txn = template_service.post_pos_sale("100", tax_rate="15", entry_date=DAY)

        assert _lines(txn) == [
            ("1010", Decimal("115.00"), Decimal("0")),
            ("4010", Decimal("0"), Decimal("100.00")),
            ("2041", Decimal("0"), Decimal("15.00")),
        ]
        assert txn.total_debit == txn.total_credit
        assert _balance(temp_db, "1010") == Decimal("115.00")
        assert _balance(temp_db, "4010") == Decimal("-100.00")
        assert _balance(temp_db, "2041") == Decimal("-15.00")

    def test_default_tax_rate_applies(self, temp_db, journal_service, reporting_service):
        service = TemplateService(temp_db, journal_service, reporting_service, default_tax_rate="15")
        txn = service.post_pos_sale("100", entry_date=DAY)
        assert txn.total_debit == Decimal("115.00")

        untaxed = service.post_pos_sale("100", tax_rate="0", entry_date=DAY)
        assert untaxed.total_debit == Decimal("100.00")

    def test_tax_settlement_overshoot(self, template_service, reporting_service):
        """With 40 payable, settling 50 is rejected and settling 40 clears the position."""
        template_service.post_pos_sale("400", tax_rate="10", entry_date=DAY)
        assert reporting_service.get_tax_position().net == Decimal("40.00")

        with pytest.raises(AmountExceedsNetTaxError) as exc_info:
            template_service.post_tax_settlement("50", entry_date=DAY)
        assert exc_info.value.net_tax == Decimal("40.00")

        txn = template_service.post_tax_settlement("40", entry_date=DAY, notes="Q2")
        position = reporting_service.get_tax_position()
        assert position.net == 0
        assert position.status is TaxStatus.SETTLED
        assert txn.transaction_type is TransactionType.TAX_SETTLEMENT

        [settlement] = template_service.list_tax_settlements()
        assert settlement.kind == "payment"
        assert settlement.amount == Decimal("40.00")
        assert settlement.reference == txn.reference
        assert settlement.transaction_id == txn.id
        assert settlement.notes == "Q2"

    def test_tax_refund_when_receivable(self, template_service, reporting_service, temp_db):
        template_service.post_purchase("200", tax_rate="15", entry_date=DAY)
        assert reporting_service.get_tax_position().status is TaxStatus.RECEIVABLE

        template_service.post_tax_settlement("30", method=PaymentMethod.CASH, entry_date=DAY)

        assert reporting_service.get_tax_position().status is TaxStatus.SETTLED
        assert _balance(temp_db, "1010") == Decimal("30.00")
        [settlement] = template_service.list_tax_settlements()
        assert settlement.kind == "refund"

    def test_settlement_with_nothing_owed(self, template_service):
        with pytest.raises(AmountExceedsNetTaxError):
            template_service.post_tax_settlement("1", entry_date=DAY)

    def test_purchase_and_supplier_payment(self, template_service, temp_db):
        template_service.post_purchase("300", entry_date=DAY)
        assert _balance(temp_db, "2010") == Decimal("-300.00")
        assert _balance(temp_db, "1030") == Decimal("300.00")

        template_service.post_supplier_payment("300", entry_date=DAY)
        assert _balance(temp_db, "2010") == Decimal("0.00")
        assert _balance(temp_db, "1020") == Decimal("-300.00")

    def test_credit_sale_and_collection(self, template_service, temp_db):
        template_service.post_pos_sale("80", method="credit", entry_date=DAY)
        assert _balance(temp_db, "1040") == Decimal("80.00")

        txn = template_service.post_customer_collection("80", method="bank", entry_date=DAY)
        assert txn.reference.startswith("REC-")
        assert _balance(temp_db, "1040") == Decimal("0.00")
        assert _balance(temp_db, "1020") == Decimal("80.00")

    def test_receipt_cannot_settle_on_credit(self, template_service):
        with pytest.raises(ValidationError):
            template_service.post_receipt("10", method="credit", entry_date=DAY)

    def test_sales_return_stores_record(self, template_service, temp_db):
        template_service.post_pos_sale("100", tax_rate="15", entry_date=DAY)
        txn = template_service.post_sales_return(
            "100",
            tax_rate="15",
            party="Walk-in",
            invoice_reference="INV-1",
            reason="Damaged",
            entry_date=DAY,
        )

        assert txn.transaction_type is TransactionType.SALES_RETURN
        assert _balance(temp_db, "1010") == Decimal("0.00")
        assert _balance(temp_db, "2041") == Decimal("0.00")
        [record] = template_service.list_return_records(kind="sales")
        assert record.amount == Decimal("100.00")
        assert record.tax_amount == Decimal("15.00")
        assert record.invoice_reference == "INV-1"
        assert record.transaction_id == txn.id

    def test_purchase_return_stores_record(self, template_service, temp_db):
        template_service.post_purchase("100", tax_rate="15", entry_date=DAY)
        template_service.post_purchase_return("40", tax_rate="15", party="Supplier", entry_date=DAY)

        assert _balance(temp_db, "1030") == Decimal("60.00")
        assert _balance(temp_db, "2010") == Decimal("-69.00")
        [record] = template_service.list_return_records(kind="purchase")
        assert record.amount == Decimal("40.00")
        assert record.tax_amount == Decimal("6.00")
        assert template_service.list_return_records(kind="sales") == []

    def test_post_quick_template_dispatch(self, template_service, temp_db):
        txn = template_service.post_quick_template(
            "transfer", amount="25", from_account="1010", to_account="1020", entry_date=DAY
        )
        assert txn.transaction_type is TransactionType.TRANSFER
        assert txn.reference.startswith("TRF-")
        assert _balance(temp_db, "1020") == Decimal("25.00")

        payment = template_service.post_quick_template("payment", amount="5", entry_date=DAY)
        assert [line.account_code for line in payment.entries] == ["5020", "1010"]

    def test_post_quick_template_unknown_kind(self, template_service):
        with pytest.raises(ValidationError, match="Unknown posting template"):
            template_service.post_quick_template("gift", amount="5")

    def test_template_rejected_by_period(self, template_service, temp_db):
        """Templates go through the same validation as manual entries."""
        with pytest.raises(ValidationError):
            template_service.post_receipt("10", entry_date=date(2026, 2, 1))
        assert temp_db.list_transactions() == []
