"""Shared pytest fixtures for microledger tests."""

import tempfile
import os
from datetime import date
import pytest

from microledger.database.factories import create_sqlite_database
from microledger.domain.account import AccountService
from microledger.domain.entities import PeriodConfig
from microledger.domain.journal import JournalService
from microledger.domain.period import PeriodGuard, PeriodService
from microledger.domain.reporting import ReportingService
from microledger.domain.templates import TemplateService
from microledger.logging_config import reset_logging

# Every service-level posting in the tests is dated inside this period.
PERIOD_2025 = PeriodConfig(
    start_date=date(2025, 1, 1),
    end_date=date(2025, 12, 31),
    name="FY2025",
)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Leave the microledger logger unconfigured between tests."""
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def seeded_chart(account_service):
    """Seed the standard chart of accounts."""
    return account_service.seed_default_chart()


@pytest.fixture
def period_config():
    return PERIOD_2025


@pytest.fixture
def period_guard(period_config):
    return PeriodGuard(period_config)


@pytest.fixture
def period_service(temp_db):
    return PeriodService(temp_db)


@pytest.fixture
def journal_service(temp_db, period_guard, seeded_chart):
    """Create a JournalService over the seeded chart and the 2025 period."""
    return JournalService(temp_db, period_guard)


@pytest.fixture
def reporting_service(temp_db, seeded_chart):
    return ReportingService(temp_db)


@pytest.fixture
def template_service(temp_db, journal_service, reporting_service):
    """Create a TemplateService with no default tax."""
    return TemplateService(temp_db, journal_service, reporting_service)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
