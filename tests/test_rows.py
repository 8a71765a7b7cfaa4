"""Tests for converting backend rows into domain records."""

from datetime import date
from decimal import Decimal

import pytest

from cashflow.domain.entities import UNKNOWN_SUPPLIER_NAME, SettlementType
from cashflow.domain.errors import ValidationError
from cashflow.domain.rows import (
    expense_items_from_rows,
    income_entries_from_rows,
    income_sources_from_rows,
    overrides_from_rows,
    rule_from_row,
)


def test_rule_from_row_maps_columns():
    """Test that flat rule columns become a settlement rule."""
    rule = rule_from_row(
        {
            "settlement_type": "custom",
            "coupon_settlement_date": "12",
            "commission_rate": "2.5",
            "fixed_fee": 1,
        }
    )

    assert rule.settlement_type == SettlementType.CUSTOM
    assert rule.coupon_settlement_day == 12
    assert rule.commission_rate == Decimal("2.5")
    assert rule.fixed_fee == Decimal("1")
    assert rule.delay_days == 1


def test_rule_from_row_without_type():
    """Test that a row without a settlement type has no rule."""
    assert rule_from_row({"settlement_type": None, "settlement_delay_days": 3}) is None


def test_income_sources_active_flag():
    """Test that deleted or inactive sources are marked inactive."""
    sources, warnings = income_sources_from_rows(
        [
            {"id": 1, "name": "Visa", "is_active": True, "settlement_type": "daily"},
            {"id": 2, "name": "Old", "is_active": True, "deleted_at": "2024-01-01T00:00:00"},
            {"id": 3, "name": "Paused", "is_active": False},
        ]
    )

    assert warnings == []
    assert [s.is_active for s in sources] == [True, False, False]
    assert sources[2].rule is None


def test_income_source_with_unknown_settlement_type_skipped():
    """Test that an unknown settlement type skips the row with a warning."""
    sources, warnings = income_sources_from_rows(
        [{"id": 1, "name": "Visa", "settlement_type": "hourly"}, {"id": 2, "name": "Cash"}]
    )

    assert [s.id for s in sources] == [2]
    assert len(warnings) == 1
    assert isinstance(warnings[0], ValidationError)
    assert "row 0" in str(warnings[0])


def test_income_entries_read_joined_date():
    """Test entry dates from the row or from the joined daily entry."""
    entries, warnings = income_entries_from_rows(
        [
            {"id": 1, "income_source_id": 4, "amount": "₪1,250.50", "daily_entries": {"entry_date": "2024-05-10"}},
            {"id": 2, "income_source_id": 4, "amount": 300, "daily_entries": [{"entry_date": "2024-05-11"}]},
            {"id": 3, "income_source_id": 4, "amount": "10", "entry_date": "2024-05-12"},
        ]
    )

    assert warnings == []
    assert [e.entry_date for e in entries] == [date(2024, 5, 10), date(2024, 5, 11), date(2024, 5, 12)]
    assert entries[0].amount == Decimal("1250.50")


def test_income_entries_bad_rows_skipped():
    """Test that rows without date, source or valid amount are skipped."""
    entries, warnings = income_entries_from_rows(
        [
            {"id": 1, "income_source_id": 4, "amount": "10"},
            {"id": 2, "amount": "10", "entry_date": "2024-05-10"},
            {"id": 3, "income_source_id": 4, "amount": "ten", "entry_date": "2024-05-10"},
            {"id": 4, "income_source_id": 4, "amount": "10", "entry_date": "2024-05-10"},
        ]
    )

    assert [e.id for e in entries] == [4]
    assert len(warnings) == 3


def test_expense_items_from_nested_rows():
    """Test supplier names from joined payments and defaults."""
    items, warnings = expense_items_from_rows(
        [
            {
                "id": 1,
                "amount": "500",
                "due_date": "2024-05-15",
                "payment_method": "bit",
                "installment_number": 2,
                "installments_count": 3,
                "payments": {"id": 9, "suppliers": {"name": "Tnuva"}},
            },
            {"id": 2, "amount": "80", "due_date": "2024-05-16"},
        ]
    )

    assert warnings == []
    assert items[0].supplier_name == "Tnuva"
    assert items[0].payment_id == 9
    assert items[0].installment_number == 2
    assert items[1].supplier_name == UNKNOWN_SUPPLIER_NAME
    assert items[1].payment_method == "other"


def test_expense_with_bad_installment_skipped():
    """Test that a non-numeric installment number skips the row."""
    items, warnings = expense_items_from_rows(
        [{"id": 1, "amount": "5", "due_date": "2024-05-15", "installment_number": "first"}]
    )

    assert items == []
    assert "expense row 0" in str(warnings[0])


def test_overrides_from_rows():
    """Test converting override rows."""
    overrides, warnings = overrides_from_rows(
        [
            {"id": 1, "settlement_date": "2024-05-12", "income_source_id": 3, "override_amount": "950", "original_amount": "970"},
            {"id": 2, "settlement_date": "2024-05-12", "income_source_id": 3},
        ]
    )

    assert len(overrides) == 1
    assert overrides[0].override_amount == Decimal("950")
    assert overrides[0].original_amount == Decimal("970")
    assert overrides[0].note is None
    assert len(warnings) == 1


def test_rows_must_be_iterable_of_mappings():
    """Test that a malformed top-level argument raises TypeError."""
    with pytest.raises(TypeError):
        income_entries_from_rows(None)
    with pytest.raises(TypeError):
        expense_items_from_rows({"id": 1})
    with pytest.raises(TypeError):
        overrides_from_rows("rows")


def test_non_mapping_rows_skipped():
    """Test that rows which are not mappings are skipped with a warning."""
    entries, warnings = income_entries_from_rows(
        [None, "2024-05-10", {"id": 1, "income_source_id": 4, "amount": "10", "entry_date": "2024-05-10"}]
    )

    assert [e.id for e in entries] == [1]
    assert len(warnings) == 2
    assert "income row 0: row is not a mapping" in str(warnings[0])

    sources, source_warnings = income_sources_from_rows([42, {"id": 2, "name": "Cash"}])
    items, expense_warnings = expense_items_from_rows([None])
    overrides, override_warnings = overrides_from_rows([["2024-05-12", 3, "950"]])

    assert [s.id for s in sources] == [2]
    assert len(source_warnings) == 1
    assert items == [] and len(expense_warnings) == 1
    assert overrides == [] and len(override_warnings) == 1
