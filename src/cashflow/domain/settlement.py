"""Settlement of income entries into predicted bank deposits.

An income source's settlement rule decides when money recorded on a business
day actually lands in the bank and how much the acquirer keeps as fee.
Periodic rules (monthly, bimonthly, coupons) settle in the month after the
entry, so a report starting on day D has to read entries from before D; see
``lookback_start``.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from cashflow.domain import errors
from cashflow.domain.entities import (
    OTHER_SOURCE_NAME,
    DailyIncomeEntry,
    IncomeSource,
    SettledIncomeItem,
    SettlementOverride,
    SettlementRule,
    SettlementType,
    SourceId,
)
from cashflow.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_MONTHS = 2

SAME_DAY_RULE = SettlementRule(settlement_type=SettlementType.SAME_DAY)


@dataclass(frozen=True)
class SettlementResult:
    """Settled items keyed by settlement date, plus configuration warnings."""

    settled: dict[date, list[SettledIncomeItem]] = field(default_factory=dict)
    warnings: tuple[ConfigurationError, ...] = ()


def _day_of_next_month(entry_date: date, day: int) -> date:
    # Day numbers past the end of the month roll into the following month.
    first_of_next = entry_date.replace(day=1) + relativedelta(months=1)
    return first_of_next + timedelta(days=day - 1)


def calculate_settlement_date(entry_date: date, rule: SettlementRule) -> date:
    """Return the date an entry's funds reach the bank under a rule."""
    settlement_type = SettlementType(rule.settlement_type)

    if settlement_type == SettlementType.SAME_DAY:
        return entry_date

    if settlement_type == SettlementType.DAILY:
        return entry_date + timedelta(days=rule.delay_days)

    if settlement_type == SettlementType.WEEKLY:
        # Next occurrence strictly after the entry; 0 = Sunday
        weekday = (entry_date.weekday() + 1) % 7
        days_until = rule.day_of_week - weekday
        if days_until <= 0:
            days_until += 7
        return entry_date + timedelta(days=days_until)

    if settlement_type == SettlementType.MONTHLY:
        return _day_of_next_month(entry_date, rule.day_of_month)

    if settlement_type == SettlementType.BIMONTHLY:
        if entry_date.day <= rule.bimonthly_first_cutoff:
            return _day_of_next_month(entry_date, rule.bimonthly_first_settlement)
        return _day_of_next_month(entry_date, rule.bimonthly_second_settlement)

    # Coupons settle together on a fixed day of the next month
    return _day_of_next_month(entry_date, rule.coupon_settlement_day)


def calculate_fee(amount: Decimal, rule: SettlementRule) -> Decimal:
    """Return the acquirer fee withheld from a gross amount."""
    return amount * Decimal(rule.commission_rate) / Decimal(100) + Decimal(rule.fixed_fee)


def max_settlement_lag(sources: Iterable[IncomeSource]) -> int:
    """Return an upper bound, in days, of the settlement delay of any source."""
    lag = 0
    for source in sources:
        rule = source.rule
        if rule is None:
            continue
        settlement_type = SettlementType(rule.settlement_type)
        if settlement_type == SettlementType.DAILY:
            lag = max(lag, rule.delay_days)
        elif settlement_type == SettlementType.WEEKLY:
            lag = max(lag, 7)
        elif settlement_type == SettlementType.MONTHLY:
            lag = max(lag, 31 + rule.day_of_month)
        elif settlement_type == SettlementType.BIMONTHLY:
            lag = max(
                lag,
                31 + max(rule.bimonthly_first_settlement, rule.bimonthly_second_settlement),
            )
        elif settlement_type == SettlementType.CUSTOM:
            lag = max(lag, 31 + rule.coupon_settlement_day)
    return lag


def lookback_start(report_start: date, months: int = DEFAULT_LOOKBACK_MONTHS) -> date:
    """Return the earliest entry date to fetch for a report starting on a date.

    Entries recorded before the report start can settle inside it, so the
    income query window has to begin earlier than the report itself.
    """
    return report_start - relativedelta(months=months)


def compute_settlement(
    entries: Iterable[DailyIncomeEntry], sources: Iterable[IncomeSource]
) -> SettlementResult:
    """Map income entries to settlement dates through their sources' rules.

    Revenue is never dropped: entries of inactive sources are settled with
    their rule under the generic "other" name, and entries whose source is
    unknown or has no rule settle same-day without fee, with a warning.

    Args:
        entries: Income entries to settle
        sources: Income sources with their settlement rules

    Returns:
        SettlementResult with items grouped by settlement date

    Raises:
        TypeError: If sources or entries are not iterables of domain records
    """
    if isinstance(sources, (str, bytes, Mapping)) or not isinstance(sources, Iterable):
        raise TypeError(f"sources must be an iterable of IncomeSource, got {type(sources).__name__}")
    if isinstance(entries, (str, bytes, Mapping)) or not isinstance(entries, Iterable):
        raise TypeError(f"entries must be an iterable of DailyIncomeEntry, got {type(entries).__name__}")

    source_map: dict[SourceId, IncomeSource] = {}
    for source in sources:
        if not isinstance(source, IncomeSource):
            raise TypeError(f"Expected IncomeSource, got {type(source).__name__}")
        source_map[source.id] = source

    settled: dict[date, list[SettledIncomeItem]] = {}
    warnings: list[ConfigurationError] = []

    for entry in entries:
        source = source_map.get(entry.income_source_id)
        if source is None:
            name = OTHER_SOURCE_NAME
            rule = SAME_DAY_RULE
            warnings.append(
                ConfigurationError(
                    errors.unknown_income_source(entry.income_source_id, entry.entry_date)
                )
            )
        elif source.rule is None:
            name = source.name if source.is_active else OTHER_SOURCE_NAME
            rule = SAME_DAY_RULE
            warnings.append(
                ConfigurationError(errors.missing_settlement_rule(source.name, entry.entry_date))
            )
        else:
            name = source.name if source.is_active else OTHER_SOURCE_NAME
            rule = source.rule

        settlement_date = calculate_settlement_date(entry.entry_date, rule)
        fee_amount = calculate_fee(entry.amount, rule)

        settled.setdefault(settlement_date, []).append(
            SettledIncomeItem(
                settlement_date=settlement_date,
                income_source_id=entry.income_source_id,
                income_source_name=name,
                original_entry_date=entry.entry_date,
                gross_amount=entry.amount,
                fee_amount=fee_amount,
                net_amount=entry.amount - fee_amount,
            )
        )

    for warning in warnings:
        logger.warning("%s", warning)

    return SettlementResult(settled=settled, warnings=tuple(warnings))


def apply_overrides(
    settled: Mapping[date, list[SettledIncomeItem]],
    overrides: Iterable[SettlementOverride],
) -> dict[date, list[SettledIncomeItem]]:
    """Return a copy of ``settled`` with manual overrides applied.

    Every item settling under an overridden (date, source) gets the override
    amount as its net, and its fee becomes ``gross - net``. Later overrides
    for the same key replace earlier ones. The input mapping and its items
    are left untouched.
    """
    override_map: dict[tuple[date, SourceId], Decimal] = {}
    for override in overrides:
        override_map[(override.settlement_date, override.income_source_id)] = Decimal(
            override.override_amount
        )

    result: dict[date, list[SettledIncomeItem]] = {}
    for settlement_date, items in settled.items():
        remapped = []
        for item in items:
            override_amount = override_map.get((settlement_date, item.income_source_id))
            if override_amount is None:
                remapped.append(item)
            else:
                remapped.append(
                    replace(
                        item,
                        net_amount=override_amount,
                        fee_amount=item.gross_amount - override_amount,
                    )
                )
        result[settlement_date] = remapped

    return result
