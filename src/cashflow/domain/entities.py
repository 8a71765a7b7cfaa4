"""Domain model entities for cashflow.

These are pure data classes representing business concepts, independent of
database schema and of the loosely typed rows the hosted backend returns.
Everything that reaches the bucketing and settlement code is one of these.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from cashflow.domain.errors import ValidationError

SourceId = int | str

OTHER_SOURCE_NAME = "אחר"
UNKNOWN_SUPPLIER_NAME = "לא ידוע"
DEFAULT_PAYMENT_METHOD = "other"


class Granularity(str, Enum):
    """Bucketing resolution for cash-flow reports."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, value: "Granularity | str") -> "Granularity":
        """Parse a granularity name, accepting daily/weekly/monthly aliases."""
        if isinstance(value, cls):
            return value
        aliases = {"daily": cls.DAY, "weekly": cls.WEEK, "monthly": cls.MONTH}
        normalized = str(value).strip().lower()
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationError(
                f"Unknown granularity '{value}'. Supported: day, week, month"
            ) from None


class EventKind(str, Enum):
    """Direction of a dated financial event."""

    INFLOW = "inflow"
    OUTFLOW = "outflow"


class SettlementType(str, Enum):
    """How an income source's funds reach the bank."""

    SAME_DAY = "same_day"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    CUSTOM = "custom"


@dataclass(frozen=True)
class DailyEvent:
    """One financial movement on a calendar date."""

    date: date
    amount: Decimal
    kind: EventKind


@dataclass(frozen=True)
class Bucket:
    """Aggregated inflows and outflows for one day, week or month."""

    key: str
    granularity: Granularity
    label: str
    start_date: date
    end_date: date
    inflows: Decimal
    outflows: Decimal
    net: Decimal
    cumulative: Decimal


@dataclass(frozen=True)
class SettlementRule:
    """Settlement timing and fee for an income source.

    Only the parameters relevant to ``settlement_type`` are consulted; the
    rest keep their defaults.
    """

    settlement_type: SettlementType = SettlementType.DAILY
    delay_days: int = 1
    day_of_week: int = 0  # 0 = Sunday
    day_of_month: int = 1
    bimonthly_first_cutoff: int = 14
    bimonthly_first_settlement: int = 2
    bimonthly_second_settlement: int = 8
    coupon_settlement_day: int = 1
    commission_rate: Decimal = Decimal("0")  # percent of gross
    fixed_fee: Decimal = Decimal("0")


@dataclass(frozen=True)
class IncomeSource:
    """Revenue channel (card acquirer, cash, coupons...) domain entity."""

    id: SourceId
    name: str
    is_active: bool = True
    rule: Optional[SettlementRule] = None


@dataclass(frozen=True)
class DailyIncomeEntry:
    """Raw income recorded for a source on a business day."""

    entry_date: date
    income_source_id: SourceId
    amount: Decimal
    id: Optional[int] = None


@dataclass(frozen=True)
class SettledIncomeItem:
    """Income entry mapped to the date its funds land in the bank."""

    settlement_date: date
    income_source_id: SourceId
    income_source_name: str
    original_entry_date: date
    gross_amount: Decimal
    fee_amount: Decimal
    net_amount: Decimal


@dataclass(frozen=True)
class SettlementOverride:
    """Manual correction of the net amount settled for a source on a date."""

    settlement_date: date
    income_source_id: SourceId
    override_amount: Decimal
    note: Optional[str] = None
    original_amount: Optional[Decimal] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class ExpenseItem:
    """Payment split due on a given date."""

    id: Optional[int]
    supplier_name: str
    amount: Decimal
    payment_method: str
    due_date: date
    payment_id: Optional[int] = None
    installment_number: int = 1
    installments_count: int = 1


@dataclass(frozen=True)
class Supplier:
    """Supplier domain entity."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Payment:
    """Supplier payment domain entity; its splits carry the due dates."""

    id: int
    supplier_id: int
    total_amount: Decimal
    payment_date: date
    created_at: datetime
    deleted_at: Optional[datetime] = None


@dataclass(frozen=True)
class CashflowSettings:
    """Opening balance anchoring the cumulative balance."""

    opening_balance: Decimal
    opening_date: date


@dataclass(frozen=True)
class DayRow:
    """One calendar day of the cash-flow report."""

    date: date
    income_items: tuple[SettledIncomeItem, ...]
    expense_items: tuple[ExpenseItem, ...]
    total_income: Decimal
    total_expenses: Decimal
    daily_diff: Decimal
    cumulative: Decimal


@dataclass(frozen=True)
class MonthGroup:
    """Calendar month of day rows with its totals."""

    key: str
    label: str
    days: tuple[DayRow, ...]
    total_income: Decimal
    total_expenses: Decimal
    total_diff: Decimal
    end_cumulative: Decimal


@dataclass(frozen=True)
class CashflowReport:
    """Cash-flow report from the opening date to the end date."""

    opening_balance: Decimal
    opening_date: date
    end_date: date
    days: tuple[DayRow, ...] = ()
    months: tuple[MonthGroup, ...] = ()
    warnings: tuple[Exception, ...] = field(default_factory=tuple)

    @property
    def final_balance(self) -> Decimal:
        """Cumulative balance at the end of the report."""
        if not self.days:
            return self.opening_balance
        return self.days[-1].cumulative

    def periods(self, granularity: Granularity | str) -> list[Bucket]:
        """Re-bucket the day rows by day, week or month."""
        from cashflow.domain.buckets import aggregate

        events: list[DailyEvent] = []
        for day in self.days:
            events.append(DailyEvent(day.date, day.total_income, EventKind.INFLOW))
            events.append(DailyEvent(day.date, day.total_expenses, EventKind.OUTFLOW))
        return aggregate(events, granularity, opening_balance=self.opening_balance)
