"""Parsing and lookup helpers for the microledger CLI."""

from microledger.utils.date_parser import parse_date, get_date_range
from microledger.utils.amount_parser import parse_amount
from microledger.utils.account_resolver import resolve_account_code

__all__ = ["parse_date", "get_date_range", "parse_amount", "resolve_account_code"]
