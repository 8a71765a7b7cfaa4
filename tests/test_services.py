"""Tests for income entry, expense, override and settings services."""

from datetime import date
from decimal import Decimal

import pytest

from cashflow.domain.errors import NotFoundError, ValidationError
from cashflow.domain.expense import split_installments


class TestIncomeEntryService:
    """Tests for recording daily income."""

    def test_record_and_list(self, income_service, card_source, cash_source):
        """Test recording income and listing it by range and source."""
        income_service.record_income(card_source.id, date(2024, 5, 10), Decimal("1000"))
        income_service.record_income(cash_source.id, date(2024, 5, 11), Decimal("250"))
        income_service.record_income(card_source.id, date(2024, 5, 20), Decimal("400"))

        assert len(income_service.list_entries()) == 3
        in_range = income_service.list_entries(start_date=date(2024, 5, 11), end_date=date(2024, 5, 31))
        assert [e.amount for e in in_range] == [Decimal("250"), Decimal("400")]
        by_source = income_service.list_entries(income_source_id=card_source.id)
        assert [e.entry_date for e in by_source] == [date(2024, 5, 10), date(2024, 5, 20)]

    def test_record_for_missing_source(self, income_service):
        """Test that income needs an existing source."""
        with pytest.raises(NotFoundError):
            income_service.record_income(999, date(2024, 5, 10), Decimal("10"))

    def test_record_negative_amount(self, income_service, cash_source):
        """Test that negative income is rejected."""
        with pytest.raises(ValidationError):
            income_service.record_income(cash_source.id, date(2024, 5, 10), Decimal("-1"))

    def test_delete_entry(self, income_service, cash_source):
        """Test deleting an income entry."""
        entry_id = income_service.record_income(cash_source.id, date(2024, 5, 10), Decimal("10"))

        income_service.delete_entry(entry_id)

        assert income_service.list_entries() == []
        with pytest.raises(NotFoundError):
            income_service.delete_entry(entry_id)


class TestExpenseService:
    """Tests for supplier payments."""

    def test_split_installments_adds_up(self):
        """Test that installments add up and fall due monthly."""
        splits = split_installments(Decimal("100"), 3, date(2024, 1, 31))

        assert [amount for amount, _ in splits] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
        assert [due for _, due in splits] == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]

    def test_split_installments_rejects_zero(self):
        """Test that at least one installment is required."""
        with pytest.raises(ValidationError):
            split_installments(Decimal("100"), 0, date(2024, 1, 1))

    def test_record_payment_with_installments(self, expense_service):
        """Test that a payment becomes one expense item per installment."""
        payment_id = expense_service.record_payment(
            "Landlord", Decimal("12000"), date(2024, 5, 1), payment_method="check", installments=3
        )

        items = expense_service.list_expenses()
        assert [item.due_date for item in items] == [date(2024, 5, 1), date(2024, 6, 1), date(2024, 7, 1)]
        assert all(item.amount == Decimal("4000") for item in items)
        assert all(item.payment_id == payment_id for item in items)
        assert [item.installment_number for item in items] == [1, 2, 3]
        assert items[0].installments_count == 3
        assert items[0].supplier_name == "Landlord"
        assert items[0].payment_method == "check"

    def test_suppliers_are_reused(self, temp_db, expense_service):
        """Test that payments to the same supplier share one supplier record."""
        expense_service.record_payment("Tnuva", Decimal("100"), date(2024, 5, 1))
        expense_service.record_payment("Tnuva ", Decimal("200"), date(2024, 5, 2))

        assert [s.name for s in temp_db.list_suppliers()] == ["Tnuva"]

    def test_record_payment_validation(self, expense_service):
        """Test that invalid payments are rejected."""
        with pytest.raises(ValidationError):
            expense_service.record_payment("", Decimal("100"), date(2024, 5, 1))
        with pytest.raises(ValidationError):
            expense_service.record_payment("Tnuva", Decimal("0"), date(2024, 5, 1))
        with pytest.raises(ValidationError):
            expense_service.record_payment("Tnuva", Decimal("10"), date(2024, 5, 1), payment_method="barter")

    def test_delete_payment_hides_installments(self, expense_service):
        """Test that deleted payments no longer count as expenses."""
        payment_id = expense_service.record_payment("Tnuva", Decimal("300"), date(2024, 5, 1), installments=2)

        expense_service.delete_payment(payment_id)

        assert expense_service.list_expenses() == []
        with pytest.raises(NotFoundError):
            expense_service.delete_payment(payment_id)

    def test_list_expenses_by_due_date(self, expense_service):
        """Test filtering expenses by due date."""
        expense_service.record_payment("Tnuva", Decimal("300"), date(2024, 5, 1), installments=3)

        items = expense_service.list_expenses(start_date=date(2024, 5, 15), end_date=date(2024, 6, 30))
        assert [item.due_date for item in items] == [date(2024, 6, 1)]


class TestOverrideService:
    """Tests for settlement overrides."""

    def test_set_override_stores_computed_gross(self, override_service, income_service, card_source):
        """Test that the computed amount is kept next to the override."""
        income_service.record_income(card_source.id, date(2024, 5, 10), Decimal("1000"))

        override_service.set_override(date(2024, 5, 12), card_source.id, Decimal("950"), note="bank statement")

        override = override_service.get_override(date(2024, 5, 12), card_source.id)
        assert override.override_amount == Decimal("950")
        assert override.original_amount == Decimal("1000")
        assert override.note == "bank statement"

    def test_set_override_replaces_previous(self, override_service, card_source):
        """Test that one override exists per date and source."""
        override_service.set_override(date(2024, 5, 12), card_source.id, Decimal("950"))
        override_service.set_override(date(2024, 5, 12), card_source.id, Decimal("940"))

        overrides = override_service.list_overrides()
        assert len(overrides) == 1
        assert overrides[0].override_amount == Decimal("940")
        assert overrides[0].original_amount == Decimal("0")

    def test_set_override_validation(self, override_service, card_source):
        """Test that negative amounts and unknown sources are rejected."""
        with pytest.raises(ValidationError):
            override_service.set_override(date(2024, 5, 12), card_source.id, Decimal("-5"))
        with pytest.raises(NotFoundError):
            override_service.set_override(date(2024, 5, 12), 999, Decimal("5"))

    def test_clear_override(self, override_service, card_source):
        """Test removing an override."""
        override_service.set_override(date(2024, 5, 12), card_source.id, Decimal("950"))

        override_service.clear_override(date(2024, 5, 12), card_source.id)

        assert override_service.get_override(date(2024, 5, 12), card_source.id) is None
        with pytest.raises(NotFoundError, match="Visa"):
            override_service.clear_override(date(2024, 5, 12), card_source.id)

    def test_list_overrides_in_range(self, override_service, card_source):
        """Test filtering overrides by settlement date."""
        override_service.set_override(date(2024, 5, 12), card_source.id, Decimal("950"))
        override_service.set_override(date(2024, 6, 12), card_source.id, Decimal("900"))

        overrides = override_service.list_overrides(start_date=date(2024, 6, 1))
        assert [o.settlement_date for o in overrides] == [date(2024, 6, 12)]


class TestSettingsService:
    """Tests for the opening balance."""

    def test_no_settings(self, settings_service):
        """Test that a new database has no opening balance."""
        assert settings_service.get_settings() is None

    def test_set_opening_balance_upserts(self, settings_service, opening_settings):
        """Test that setting the balance again replaces it."""
        assert opening_settings.opening_balance == Decimal("10000")

        settings_service.set_opening_balance(Decimal("-250.50"), date(2024, 6, 1))

        settings = settings_service.get_settings()
        assert settings.opening_balance == Decimal("-250.50")
        assert settings.opening_date == date(2024, 6, 1)
