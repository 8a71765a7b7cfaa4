"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from cashflow.domain import entities
from cashflow.domain.errors import NotFoundError


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_income_source_returns_domain_model(self, temp_db):
        """Test that income sources come back with their rule."""
        rule = entities.SettlementRule(
            settlement_type=entities.SettlementType.WEEKLY, day_of_week=3, fixed_fee=Decimal("1.50")
        )
        source_id = temp_db.create_income_source(name="Wolt", rule=rule)

        source = temp_db.get_income_source(source_id)

        assert isinstance(source, entities.IncomeSource)
        assert isinstance(source.rule, entities.SettlementRule)
        assert source.rule.day_of_week == 3
        assert source.rule.fixed_fee == Decimal("1.50")
        assert temp_db.get_income_source_by_name("Wolt") == source
        assert temp_db.get_income_source(999) is None

    def test_income_entry_returns_domain_model(self, temp_db):
        """Test that income entries come back as domain entities."""
        source_id = temp_db.create_income_source(name="Cash")
        entry_id = temp_db.create_income_entry(source_id, date(2024, 5, 10), Decimal("99.90"))

        entry = temp_db.get_income_entry(entry_id)

        assert isinstance(entry, entities.DailyIncomeEntry)
        assert entry.id == entry_id
        assert entry.income_source_id == source_id
        assert entry.entry_date == date(2024, 5, 10)
        assert entry.amount == Decimal("99.90")

    def test_income_entry_requires_source(self, temp_db):
        """Test that entries cannot reference missing sources."""
        with pytest.raises(NotFoundError):
            temp_db.create_income_entry(42, date(2024, 5, 10), Decimal("1"))

    def test_payment_returns_domain_models(self, temp_db):
        """Test that payments and their splits map to domain entities."""
        supplier_id = temp_db.get_or_create_supplier("Tnuva")
        payment_id = temp_db.create_payment(
            supplier_id=supplier_id,
            payment_date=date(2024, 5, 1),
            splits=[
                (Decimal("60"), "cash", date(2024, 5, 1)),
                (Decimal("40"), "cash", date(2024, 6, 1)),
            ],
        )

        payment = temp_db.get_payment(payment_id)
        assert isinstance(payment, entities.Payment)
        assert payment.total_amount == Decimal("100")
        assert payment.deleted_at is None
        assert isinstance(payment.created_at, datetime)

        items = temp_db.list_expense_items()
        assert all(isinstance(item, entities.ExpenseItem) for item in items)
        assert [item.installment_number for item in items] == [1, 2]
        assert items[1].installments_count == 2

    def test_soft_delete_payment(self, temp_db):
        """Test that soft deleted payments keep their record."""
        supplier_id = temp_db.get_or_create_supplier("Tnuva")
        payment_id = temp_db.create_payment(supplier_id, date(2024, 5, 1), [(Decimal("5"), "bit", date(2024, 5, 1))])

        temp_db.soft_delete_payment(payment_id)

        assert temp_db.get_payment(payment_id).deleted_at is not None
        assert temp_db.list_expense_items() == []

    def test_upsert_override(self, temp_db):
        """Test that overrides are unique per date and source."""
        source_id = temp_db.create_income_source(name="Visa")
        first_id = temp_db.upsert_override(date(2024, 5, 12), source_id, Decimal("950"), note="a")
        second_id = temp_db.upsert_override(date(2024, 5, 12), source_id, Decimal("940"))

        override = temp_db.get_override(date(2024, 5, 12), source_id)
        assert first_id == second_id
        assert isinstance(override, entities.SettlementOverride)
        assert override.override_amount == Decimal("940")
        assert override.note is None

    def test_settings_round_trip(self, temp_db):
        """Test saving opening balance settings."""
        assert temp_db.get_cashflow_settings() is None

        temp_db.save_cashflow_settings(Decimal("1500"), date(2024, 1, 1))

        settings = temp_db.get_cashflow_settings()
        assert isinstance(settings, entities.CashflowSettings)
        assert settings.opening_balance == Decimal("1500")
