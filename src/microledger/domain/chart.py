"""Standard small-business chart of accounts."""

from dataclasses import dataclass
from typing import Optional

from microledger.domain.entities import AccountType, PaymentMethod
from microledger.domain.errors import ValidationError

A = AccountType.ASSET
L = AccountType.LIABILITY
E = AccountType.EQUITY
R = AccountType.REVENUE
X = AccountType.EXPENSE

# (code, name, type, parent code); parents precede their children
DEFAULT_CHART = [
    # Assets
    ("1000", "Assets", A, None),
    ("1010", "Cash", A, "1000"),
    ("1020", "Bank", A, "1000"),
    ("1030", "Inventory", A, "1000"),
    ("1040", "Accounts receivable", A, "1000"),
    ("1050", "Fixed assets", A, "1000"),
    ("1060", "Prepaid expenses", A, "1000"),
    ("1070", "Input tax", A, "1000"),
    ("1075", "Net recoverable tax", A, "1070"),
    ("1080", "Other receivables", A, "1000"),
    # Liabilities
    ("2000", "Liabilities", L, None),
    ("2010", "Accounts payable", L, "2000"),
    ("2020", "Loans", L, "2000"),
    ("2030", "Accrued wages", L, "2000"),
    ("2040", "Taxes payable", L, "2000"),
    ("2041", "Output tax", L, "2040"),
    ("2045", "Net tax payable", L, "2040"),
    ("2050", "Other payables", L, "2000"),
    # Equity
    ("3000", "Equity", E, None),
    ("3010", "Capital", E, "3000"),
    ("3020", "Retained earnings", E, "3000"),
    ("3030", "Current year profit", E, "3000"),
    ("3040", "Drawings", E, "3000"),
    ("3050", "Current period profit", E, "3000"),
    ("3060", "Prior period profit", E, "3000"),
    # Revenue
    ("4000", "Revenue", R, None),
    ("4010", "Sales", R, "4000"),
    ("4020", "Service revenue", R, "4000"),
    ("4030", "Sales discounts", R, "4000"),
    ("4040", "Sales returns", R, "4000"),
    ("4050", "Other revenue", R, "4000"),
    ("4060", "Closed-period revenue", R, "4000"),
    ("4070", "Purchase discounts", R, "4000"),
    # Expenses
    ("5000", "Expenses", X, None),
    ("5010", "Cost of goods sold", X, "5000"),
    ("5020", "Operating expenses", X, "5000"),
    ("5030", "Salaries", X, "5000"),
    ("5040", "Rent", X, "5000"),
    ("5050", "Utilities", X, "5000"),
    ("5060", "Maintenance", X, "5000"),
    ("5070", "Advertising", X, "5000"),
    ("5080", "Transport", X, "5000"),
    ("5090", "Administrative expenses", X, "5000"),
    ("5100", "Closed-period expenses", X, "5000"),
    ("5110", "Tax expenses", X, "5000"),
]


@dataclass(frozen=True)
class PostingAccounts:
    """Account codes used by the canned postings and the tax reports."""

    cash: str = "1010"
    bank: str = "1020"
    inventory: str = "1030"
    receivable: str = "1040"
    input_tax: str = "1070"
    payable: str = "2010"
    output_tax: str = "2041"
    sales_revenue: str = "4010"
    sales_discount: str = "4030"
    sales_returns: str = "4040"
    purchase_discount: str = "4070"
    cogs: str = "5010"
    operating_expense: str = "5020"

    def settlement_account(self, method: PaymentMethod, on_credit: Optional[str] = None) -> str:
        """Return the account a payment method settles through.

        ``on_credit`` is the receivable or payable used for credit terms;
        when it is None, credit terms are rejected.
        """
        method = PaymentMethod(method)
        if method is PaymentMethod.CASH:
            return self.cash
        if method is PaymentMethod.BANK:
            return self.bank
        if on_credit is None:
            raise ValidationError("Payment method 'credit' is not allowed here; use cash or bank")
        return on_credit


DEFAULT_POSTING_ACCOUNTS = PostingAccounts()
