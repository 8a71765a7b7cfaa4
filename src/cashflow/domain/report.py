"""Cash-flow report domain service."""

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from cashflow.database.base import Database
from cashflow.domain import rows
from cashflow.domain.buckets import aggregate
from cashflow.domain.entities import (
    CashflowReport,
    DailyEvent,
    DayRow,
    EventKind,
    ExpenseItem,
    Granularity,
    MonthGroup,
    SettledIncomeItem,
)
from cashflow.domain.errors import ValidationError
from cashflow.domain.settlement import (
    DEFAULT_LOOKBACK_MONTHS,
    apply_overrides,
    compute_settlement,
    lookback_start,
    max_settlement_lag,
)
from cashflow.utils.amount_parser import parse_amount
from cashflow.utils.date_parser import coerce_date

logger = logging.getLogger(__name__)


def _in_window(day: date, start: date, end: date) -> bool:
    return start <= day <= end


def build_cashflow_report(
    settled: Mapping[date, list[SettledIncomeItem]],
    expenses: Iterable[ExpenseItem],
    *,
    opening_balance: Decimal,
    opening_date: date,
    end_date: date,
    warnings: Iterable[Exception] = (),
) -> CashflowReport:
    """Merge settled income and expenses into a day-by-day report.

    Every calendar day from ``opening_date`` to ``end_date`` gets a row, even
    without activity. The cumulative balance starts at ``opening_balance``.
    Income settling and expenses falling due outside the window are ignored.

    Args:
        settled: Settled income items by settlement date, overrides applied
        expenses: Expense items by due date
        opening_balance: Bank balance at the opening date
        opening_date: First day of the report
        end_date: Last day of the report
        warnings: Problems collected while preparing the inputs

    Returns:
        CashflowReport with day rows and month groups
    """
    warnings = tuple(warnings)
    if end_date < opening_date:
        return CashflowReport(
            opening_balance=opening_balance,
            opening_date=opening_date,
            end_date=end_date,
            warnings=warnings,
        )

    income_by_date: dict[date, tuple[SettledIncomeItem, ...]] = {
        day: tuple(items)
        for day, items in settled.items()
        if _in_window(day, opening_date, end_date)
    }
    expenses_by_date: dict[date, list[ExpenseItem]] = defaultdict(list)
    for item in expenses:
        if _in_window(item.due_date, opening_date, end_date):
            expenses_by_date[item.due_date].append(item)

    events: list[DailyEvent] = []
    for day, items in income_by_date.items():
        for income in items:
            events.append(DailyEvent(day, income.net_amount, EventKind.INFLOW))
    for day, items in expenses_by_date.items():
        for expense in items:
            events.append(DailyEvent(day, expense.amount, EventKind.OUTFLOW))

    buckets = aggregate(
        events,
        Granularity.DAY,
        opening_balance=opening_balance,
        fill_gaps=True,
        start=opening_date,
        end=end_date,
    )

    days = tuple(
        DayRow(
            date=bucket.start_date,
            income_items=income_by_date.get(bucket.start_date, ()),
            expense_items=tuple(expenses_by_date.get(bucket.start_date, ())),
            total_income=bucket.inflows,
            total_expenses=bucket.outflows,
            daily_diff=bucket.net,
            cumulative=bucket.cumulative,
        )
        for bucket in buckets
    )

    return CashflowReport(
        opening_balance=opening_balance,
        opening_date=opening_date,
        end_date=end_date,
        days=days,
        months=tuple(build_month_groups(days, opening_balance)),
        warnings=warnings,
    )


def build_month_groups(days: Iterable[DayRow], opening_balance: Decimal) -> list[MonthGroup]:
    """Group day rows by calendar month."""
    days = list(days)
    days_by_month: dict[str, list[DayRow]] = defaultdict(list)
    for day in days:
        days_by_month[day.date.strftime("%Y-%m")].append(day)

    events: list[DailyEvent] = []
    for day in days:
        events.append(DailyEvent(day.date, day.total_income, EventKind.INFLOW))
        events.append(DailyEvent(day.date, day.total_expenses, EventKind.OUTFLOW))

    return [
        MonthGroup(
            key=bucket.key,
            label=bucket.label,
            days=tuple(days_by_month[bucket.key]),
            total_income=bucket.inflows,
            total_expenses=bucket.outflows,
            total_diff=bucket.net,
            end_cumulative=bucket.cumulative,
        )
        for bucket in aggregate(events, Granularity.MONTH, opening_balance=opening_balance)
    ]


def build_report_from_rows(
    *,
    source_rows: Iterable[Mapping[str, Any]],
    income_rows: Iterable[Mapping[str, Any]],
    expense_rows: Iterable[Mapping[str, Any]],
    override_rows: Iterable[Mapping[str, Any]] = (),
    opening_balance: Decimal | str | int = Decimal("0"),
    opening_date: date | str,
    end_date: date | str,
) -> CashflowReport:
    """Build a report straight from backend row sets.

    The caller must fetch income rows from ``lookback_start(opening_date)``
    onward, not from the opening date, or income settling early in the window
    will be missing. Rows that fail validation are skipped and listed in
    ``report.warnings``.

    Raises:
        ValidationError: If the opening date, end date or balance is invalid
        TypeError: If a row set is not an iterable of mappings
    """
    opening_date = coerce_date(opening_date)
    end_date = coerce_date(end_date)
    opening_balance = parse_amount(opening_balance)

    sources, source_warnings = rows.income_sources_from_rows(source_rows)
    entries, entry_warnings = rows.income_entries_from_rows(income_rows)
    expenses, expense_warnings = rows.expense_items_from_rows(expense_rows)
    overrides, override_warnings = rows.overrides_from_rows(override_rows)

    result = compute_settlement(entries, sources)
    settled = apply_overrides(result.settled, overrides)

    warnings: list[Exception] = [
        *source_warnings,
        *entry_warnings,
        *expense_warnings,
        *override_warnings,
        *result.warnings,
    ]
    for warning in warnings:
        if isinstance(warning, ValidationError):
            logger.warning("%s", warning)

    return build_cashflow_report(
        settled,
        expenses,
        opening_balance=opening_balance,
        opening_date=opening_date,
        end_date=end_date,
        warnings=warnings,
    )


class CashflowReportService:
    """Service for building cash-flow reports from stored records."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def income_fetch_start(
        self, opening_date: date, lookback_months: int = DEFAULT_LOOKBACK_MONTHS
    ) -> date:
        """Return the first entry date that can settle on or after the opening date."""
        sources = self.db.list_income_sources(include_inactive=True)
        lag_start = opening_date - timedelta(days=max_settlement_lag(sources))
        return min(lookback_start(opening_date, lookback_months), lag_start)

    def build_report(
        self,
        end_date: date,
        *,
        opening_date: Optional[date] = None,
        opening_balance: Optional[Decimal] = None,
        lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
    ) -> CashflowReport:
        """Build the cash-flow report up to an end date.

        Args:
            end_date: Last day of the report
            opening_date: First day of the report (defaults to the stored
                opening date, or today)
            opening_balance: Balance at the opening date (defaults to the
                stored opening balance, or zero)
            lookback_months: Months of income entries read before the
                opening date

        Returns:
            CashflowReport for the window
        """
        settings = self.db.get_cashflow_settings()
        if opening_balance is None:
            opening_balance = settings.opening_balance if settings else Decimal("0")
        if opening_date is None:
            opening_date = settings.opening_date if settings else date.today()

        fetch_start = self.income_fetch_start(opening_date, lookback_months)
        logger.debug(
            "Building report %s..%s, reading income from %s", opening_date, end_date, fetch_start
        )

        sources = self.db.list_income_sources(include_inactive=True)
        entries = self.db.list_income_entries(start_date=fetch_start, end_date=end_date)
        expenses = self.db.list_expense_items(start_date=opening_date, end_date=end_date)
        overrides = self.db.list_overrides(start_date=opening_date, end_date=end_date)

        result = compute_settlement(entries, sources)
        settled = apply_overrides(result.settled, overrides)

        return build_cashflow_report(
            settled,
            expenses,
            opening_balance=opening_balance,
            opening_date=opening_date,
            end_date=end_date,
            warnings=result.warnings,
        )
