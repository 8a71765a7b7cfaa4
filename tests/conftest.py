"""Shared pytest fixtures for cashflow tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from cashflow.database.factories import create_sqlite_database
from cashflow.domain.entities import SettlementRule, SettlementType
from cashflow.domain.expense import ExpenseService
from cashflow.domain.income_entry import IncomeEntryService
from cashflow.domain.income_source import IncomeSourceService
from cashflow.domain.override import OverrideService, SettingsService
from cashflow.domain.report import CashflowReportService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def source_service(temp_db):
    """Create an IncomeSourceService with a temporary database."""
    return IncomeSourceService(temp_db)


@pytest.fixture
def income_service(temp_db):
    """Create an IncomeEntryService with a temporary database."""
    return IncomeEntryService(temp_db)


@pytest.fixture
def expense_service(temp_db):
    """Create an ExpenseService with a temporary database."""
    return ExpenseService(temp_db)


@pytest.fixture
def override_service(temp_db):
    """Create an OverrideService with a temporary database."""
    return OverrideService(temp_db)


@pytest.fixture
def settings_service(temp_db):
    """Create a SettingsService with a temporary database."""
    return SettingsService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a CashflowReportService with a temporary database."""
    return CashflowReportService(temp_db)


@pytest.fixture
def card_rule():
    """Card acquirer rule: two days after the entry, 3% fee."""
    return SettlementRule(
        settlement_type=SettlementType.DAILY, delay_days=2, commission_rate=Decimal("3")
    )


@pytest.fixture
def card_source(source_service, card_rule):
    """Create a card income source settling two days later with a 3% fee."""
    source_id = source_service.create_income_source(name="Visa", rule=card_rule)
    return source_service.get_income_source(source_id)


@pytest.fixture
def cash_source(source_service):
    """Create a cash income source settling the same day."""
    source_id = source_service.create_income_source(
        name="Cash", rule=SettlementRule(settlement_type=SettlementType.SAME_DAY)
    )
    return source_service.get_income_source(source_id)


@pytest.fixture
def opening_settings(settings_service):
    """Save an opening balance of 10,000 on 2024-05-01."""
    settings_service.set_opening_balance(Decimal("10000"), date(2024, 5, 1))
    return settings_service.get_settings()


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
