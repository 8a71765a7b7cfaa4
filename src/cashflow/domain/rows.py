"""Conversion of loosely typed backend rows into domain records.

The hosted backend returns rows as nested dictionaries (joined tables are
inlined as optional nested objects, amounts often arrive as strings). Each
converter validates rows one by one and returns the records it could build
together with a ``ValidationError`` for every row it had to skip, so one bad
row never blanks a whole report.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Optional

from cashflow.domain import errors
from cashflow.domain.entities import (
    DEFAULT_PAYMENT_METHOD,
    UNKNOWN_SUPPLIER_NAME,
    DailyIncomeEntry,
    ExpenseItem,
    IncomeSource,
    SettlementOverride,
    SettlementRule,
    SettlementType,
)
from cashflow.domain.errors import ValidationError
from cashflow.utils.amount_parser import parse_amount
from cashflow.utils.date_parser import coerce_date

RULE_COLUMNS = {
    "settlement_delay_days": "delay_days",
    "settlement_day_of_week": "day_of_week",
    "settlement_day_of_month": "day_of_month",
    "bimonthly_first_cutoff": "bimonthly_first_cutoff",
    "bimonthly_first_settlement": "bimonthly_first_settlement",
    "bimonthly_second_settlement": "bimonthly_second_settlement",
    "coupon_settlement_date": "coupon_settlement_day",
}


def _check_rows(rows: Iterable[Mapping[str, Any]], kind: str) -> None:
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
        raise TypeError(f"{kind} rows must be an iterable of mappings, got {type(rows).__name__}")


def _nested(row: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = row.get(key)
    # One-to-one joins sometimes come back as single-element lists
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, Mapping) else {}


def _row(row: Any) -> Mapping[str, Any]:
    if not isinstance(row, Mapping):
        raise ValidationError(f"row is not a mapping: {row!r}")
    return row


def _required(row: Mapping[str, Any], key: str) -> Any:
    value = row.get(key)
    if value is None or value == "":
        raise ValidationError(f"missing {key}")
    return value


def rule_from_row(row: Mapping[str, Any]) -> Optional[SettlementRule]:
    """Build a settlement rule from flat income-source columns.

    Returns None when the row has no settlement type.

    Raises:
        ValidationError: If the settlement type or a parameter is invalid
    """
    settlement_type = row.get("settlement_type")
    if not settlement_type:
        return None
    try:
        kwargs: dict[str, Any] = {"settlement_type": SettlementType(settlement_type)}
    except ValueError:
        raise ValidationError(f"unknown settlement type '{settlement_type}'") from None

    for column, attribute in RULE_COLUMNS.items():
        value = row.get(column)
        if value is None:
            continue
        try:
            kwargs[attribute] = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"invalid {column} '{value}'") from None

    if row.get("commission_rate") is not None:
        kwargs["commission_rate"] = parse_amount(row["commission_rate"])
    if row.get("fixed_fee") is not None:
        kwargs["fixed_fee"] = parse_amount(row["fixed_fee"])
    return SettlementRule(**kwargs)


def income_sources_from_rows(
    rows: Iterable[Mapping[str, Any]],
) -> tuple[list[IncomeSource], list[ValidationError]]:
    """Convert income_sources rows into IncomeSource records."""
    _check_rows(rows, "income source")
    sources: list[IncomeSource] = []
    warnings: list[ValidationError] = []

    for index, row in enumerate(rows):
        try:
            row = _row(row)
            sources.append(
                IncomeSource(
                    id=_required(row, "id"),
                    name=str(row.get("name") or ""),
                    is_active=bool(row.get("is_active", True)) and row.get("deleted_at") is None,
                    rule=rule_from_row(row),
                )
            )
        except ValueError as e:
            warnings.append(ValidationError(errors.skipped_row("income source", str(e), index)))

    return sources, warnings


def income_entries_from_rows(
    rows: Iterable[Mapping[str, Any]],
) -> tuple[list[DailyIncomeEntry], list[ValidationError]]:
    """Convert income breakdown rows into DailyIncomeEntry records.

    The entry date is read from the row itself or from the joined
    ``daily_entries`` object.
    """
    _check_rows(rows, "income")
    entries: list[DailyIncomeEntry] = []
    warnings: list[ValidationError] = []

    for index, row in enumerate(rows):
        try:
            row = _row(row)
            entry_date = row.get("entry_date") or _nested(row, "daily_entries").get("entry_date")
            if not entry_date:
                raise ValidationError("missing entry_date")
            entries.append(
                DailyIncomeEntry(
                    id=row.get("id"),
                    entry_date=coerce_date(entry_date),
                    income_source_id=_required(row, "income_source_id"),
                    amount=parse_amount(_required(row, "amount")),
                )
            )
        except ValueError as e:
            warnings.append(ValidationError(errors.skipped_row("income", str(e), index)))

    return entries, warnings


def expense_items_from_rows(
    rows: Iterable[Mapping[str, Any]],
) -> tuple[list[ExpenseItem], list[ValidationError]]:
    """Convert payment_splits rows (with joined payment and supplier) into expenses."""
    _check_rows(rows, "expense")
    items: list[ExpenseItem] = []
    warnings: list[ValidationError] = []

    for index, row in enumerate(rows):
        try:
            row = _row(row)
            payment = _nested(row, "payments")
            supplier = _nested(payment, "suppliers")
            items.append(
                ExpenseItem(
                    id=row.get("id"),
                    supplier_name=supplier.get("name") or row.get("supplier_name") or UNKNOWN_SUPPLIER_NAME,
                    amount=parse_amount(_required(row, "amount")),
                    payment_method=row.get("payment_method") or DEFAULT_PAYMENT_METHOD,
                    due_date=coerce_date(_required(row, "due_date")),
                    payment_id=row.get("payment_id") or payment.get("id"),
                    installment_number=int(row.get("installment_number") or 1),
                    installments_count=int(row.get("installments_count") or 1),
                )
            )
        except ValueError as e:
            warnings.append(ValidationError(errors.skipped_row("expense", str(e), index)))

    return items, warnings


def overrides_from_rows(
    rows: Iterable[Mapping[str, Any]],
) -> tuple[list[SettlementOverride], list[ValidationError]]:
    """Convert cashflow_income_overrides rows into SettlementOverride records."""
    _check_rows(rows, "override")
    overrides: list[SettlementOverride] = []
    warnings: list[ValidationError] = []

    for index, row in enumerate(rows):
        try:
            row = _row(row)
            original = row.get("original_amount")
            overrides.append(
                SettlementOverride(
                    id=row.get("id"),
                    settlement_date=coerce_date(_required(row, "settlement_date")),
                    income_source_id=_required(row, "income_source_id"),
                    override_amount=parse_amount(_required(row, "override_amount")),
                    note=row.get("note") or None,
                    original_amount=parse_amount(original) if original is not None else None,
                )
            )
        except ValueError as e:
            warnings.append(ValidationError(errors.skipped_row("override", str(e), index)))

    return overrides, warnings
