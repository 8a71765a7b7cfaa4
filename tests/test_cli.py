"""Tests for CLI commands."""

import logging
from decimal import Decimal

import click
import pytest

from cashflow.cli.commands.report import format_currency
from cashflow.cli.error_handling import handle_domain_error
from cashflow.cli.main import cli
from cashflow.domain.errors import NotFoundError


@pytest.fixture
def invoke(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def _invoke(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return _invoke


def test_help_does_not_need_database(cli_runner):
    """Test that --help works without opening a database."""
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "report" in result.output
    assert "override" in result.output


def test_source_add_and_list(invoke):
    """Test creating and listing income sources."""
    result = invoke("source", "add", "Visa", "--settlement", "daily", "--delay-days", "2", "--commission", "3")
    assert result.exit_code == 0
    assert "Created income source 'Visa' (ID: 1)" in result.output
    assert "+2 days, 3% fee" in result.output

    result = invoke("source", "add", "Coupons", "--settlement", "custom", "--coupon-day", "5")
    assert result.exit_code == 0

    result = invoke("source", "list")
    assert result.exit_code == 0
    assert "Visa" in result.output
    assert "coupons on day 5" in result.output


def test_source_add_duplicate(invoke):
    """Test that duplicate source names fail with exit code 1."""
    invoke("source", "add", "Visa")
    result = invoke("source", "add", "Visa")

    assert result.exit_code == 1
    assert "Error: Income source with name 'Visa' already exists" in result.output


def test_source_add_invalid_rule(invoke):
    """Test that out-of-range rule options are rejected."""
    result = invoke("source", "add", "Visa", "--settlement", "weekly", "--day-of-week", "9")

    assert result.exit_code == 1
    assert "Day of week" in result.output


def test_source_set_rule_and_deactivate(invoke, temp_db):
    """Test changing a rule and deactivating a source."""
    invoke("source", "add", "Isracard")

    result = invoke("source", "set-rule", "Isracard", "--settlement", "monthly", "--day-of-month", "10")
    assert result.exit_code == 0
    assert "monthly on day 10" in result.output

    result = invoke("source", "deactivate", "Isracard")
    assert result.exit_code == 0

    result = invoke("source", "list")
    assert "No income sources found." in result.output
    result = invoke("source", "list", "--all")
    assert "(inactive)" in result.output


def test_source_not_found(invoke):
    """Test that unknown sources are reported."""
    result = invoke("source", "deactivate", "Mastercard")

    assert result.exit_code == 1
    assert "Income source 'Mastercard' not found" in result.output


def test_income_add_list_delete(invoke):
    """Test the income entry commands."""
    invoke("source", "add", "Cash", "--settlement", "same_day")

    result = invoke("income", "add", "Cash", "1,250.50", "--date", "2024-05-10")
    assert result.exit_code == 0
    assert "Recorded income entry 1 for 2024-05-10" in result.output

    result = invoke("income", "list", "--start-date", "2024-05-01", "--end-date", "2024-05-31")
    assert result.exit_code == 0
    assert "1,250.50" in result.output
    assert "Cash" in result.output

    result = invoke("income", "delete", "1")
    assert result.exit_code == 0

    result = invoke("income", "list")
    assert "No income entries found." in result.output


def test_income_add_bad_amount(invoke):
    """Test that unparsable amounts fail."""
    invoke("source", "add", "Cash")

    result = invoke("income", "add", "Cash", "lots")

    assert result.exit_code == 1
    assert "Could not parse amount" in result.output


def test_income_add_bad_date(invoke):
    """Test that unparsable dates fail."""
    invoke("source", "add", "Cash")

    result = invoke("income", "add", "Cash", "10", "--date", "someday")

    assert result.exit_code == 1
    assert "Invalid date" in result.output


def test_expense_add_with_installments(invoke):
    """Test recording a payment in installments."""
    result = invoke(
        "expense", "add", "Landlord", "12000", "--due-date", "2024-05-01", "--method", "check", "--installments", "3"
    )
    assert result.exit_code == 0
    assert "Recorded payment 1 to 'Landlord'" in result.output
    assert "Split into 3 monthly installments" in result.output

    result = invoke("expense", "list")
    assert result.exit_code == 0
    assert "2024-07-01" in result.output
    assert "(3/3)" in result.output

    result = invoke("expense", "delete", "1")
    assert result.exit_code == 0
    result = invoke("expense", "list")
    assert "No expenses found." in result.output


def test_expense_delete_missing(invoke):
    """Test deleting a payment that does not exist."""
    result = invoke("expense", "delete", "5")

    assert result.exit_code == 1
    assert "Payment 5 not found" in result.output


def test_override_commands(invoke):
    """Test setting, listing and clearing overrides."""
    invoke("source", "add", "Visa", "--delay-days", "2", "--commission", "3")
    invoke("income", "add", "Visa", "1000", "--date", "2024-05-10")

    result = invoke("override", "set", "2024-05-12", "Visa", "950", "--note", "bank statement")
    assert result.exit_code == 0
    assert "950.00 (computed gross 1,000.00)" in result.output

    result = invoke("override", "list")
    assert result.exit_code == 0
    assert "bank statement" in result.output

    result = invoke("override", "clear", "2024-05-12", "Visa")
    assert result.exit_code == 0

    result = invoke("override", "clear", "2024-05-12", "Visa")
    assert result.exit_code == 1
    assert "No override for 'Visa'" in result.output


def test_balance_set_and_show(invoke):
    """Test the opening balance commands."""
    result = invoke("balance", "show")
    assert "No opening balance set." in result.output

    result = invoke("balance", "set", "(1,500)", "--date", "2024-05-01")
    assert result.exit_code == 0
    assert "-1,500.00" in result.output

    result = invoke("balance", "show")
    assert "Opening balance: -1,500.00 on 2024-05-01" in result.output


def test_format_currency():
    """Test shekel formatting."""
    assert format_currency(Decimal("1234")) == "₪1,234.00"
    assert format_currency(Decimal("-1234.5")) == "-₪1,234.50"
    assert format_currency(Decimal("0")) == "₪0.00"


@pytest.fixture
def may_books(invoke):
    """Opening balance, a card source, income and a payment in May 2024."""
    invoke("balance", "set", "10000", "--date", "2024-05-01")
    invoke("source", "add", "Visa", "--delay-days", "2", "--commission", "3")
    invoke("income", "add", "Visa", "1000", "--date", "2024-05-10")
    invoke("expense", "add", "Tnuva", "400", "--due-date", "2024-05-12")
    return invoke


def test_report_by_day(may_books):
    """Test the daily report with details."""
    result = may_books("report", "--end-date", "2024-05-31", "--details")

    assert result.exit_code == 0
    assert "Opening balance: ₪10,000.00" in result.output
    assert "מאי 2024" in result.output
    assert "12/05/2024" in result.output
    assert "+ Visa: ₪970.00 (fee ₪30.00)" in result.output
    assert "- Tnuva [bank_transfer]: ₪400.00" in result.output
    assert "Closing balance: ₪10,570.00" in result.output


def test_report_by_week(may_books):
    """Test the weekly report."""
    result = may_books("report", "--end-date", "2024-05-31", "--view", "week")

    assert result.exit_code == 0
    assert "12/05 - 18/05" in result.output
    assert "Closing balance: ₪10,570.00" in result.output


def test_report_with_override(may_books):
    """Test that overrides change the report."""
    may_books("override", "set", "2024-05-12", "Visa", "950")

    result = may_books("report", "--end-date", "2024-05-31", "--view", "month")

    assert result.exit_code == 0
    assert "Closing balance: ₪10,550.00" in result.output


def test_report_warns_about_fallback_settlement(may_books):
    """Test that sources without a rule are flagged after the report."""
    may_books("source", "add", "Bit", "--settlement", "none")
    may_books("income", "add", "Bit", "50", "--date", "2024-05-20")

    result = may_books("report", "--end-date", "2024-05-31")

    assert result.exit_code == 0
    assert "Closing balance: ₪10,620.00" in result.output
    assert "1 income entries settled with fallback rules" in result.output
    assert "has no settlement rule" in result.output


def test_report_rejects_end_date_with_period(may_books):
    """Test that --end-date and period flags are exclusive."""
    result = may_books("report", "--end-date", "2024-05-31", "--next-month")

    assert result.exit_code == 1
    assert "cannot be combined" in result.output


def test_report_before_opening_date(may_books):
    """Test a report ending before the opening date."""
    result = may_books("report", "--end-date", "2024-04-30")

    assert result.exit_code == 0
    assert "No days in range." in result.output
    assert "Closing balance: ₪10,000.00" in result.output


def test_domain_error_exits_with_message_and_logs_class(capsys, caplog):
    """Test that a domain error is printed, logged with its class, and exits 1."""
    ctx = click.Context(click.Command("delete"), info_name="delete")

    with caplog.at_level(logging.DEBUG, logger="cashflow.cli.error_handling"):
        with pytest.raises(click.exceptions.Exit) as exc_info:
            handle_domain_error(ctx, NotFoundError("Payment 5 not found"))

    assert exc_info.value.exit_code == 1
    assert capsys.readouterr().err == "Error: Payment 5 not found\n"
    assert "NotFoundError in 'delete': Payment 5 not found" in caplog.text
