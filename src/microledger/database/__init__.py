"""Ledger store for the microledger application."""

from microledger.database.base import Database
from microledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
