"""Settlement override and opening balance domain services."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from cashflow.database.base import Database
from cashflow.domain import errors
from cashflow.domain.entities import CashflowSettings, SettlementOverride
from cashflow.domain.errors import NotFoundError, ValidationError
from cashflow.domain.settlement import compute_settlement, lookback_start, max_settlement_lag


class OverrideService:
    """Service for manual corrections of settled income."""

    def __init__(self, db: Database):
        """Initialize override service.

        Args:
            db: Database instance
        """
        self.db = db

    def computed_gross(self, settlement_date: date, income_source_id: int) -> Decimal:
        """Return the gross income computed to settle for a source on a date."""
        source = self.db.get_income_source(income_source_id)
        if source is None:
            raise NotFoundError(errors.income_source_not_found(income_source_id))

        fetch_start = min(
            lookback_start(settlement_date),
            settlement_date - timedelta(days=max_settlement_lag([source])),
        )
        entries = self.db.list_income_entries(
            start_date=fetch_start, end_date=settlement_date, income_source_id=income_source_id
        )
        result = compute_settlement(entries, [source])
        return sum(
            (item.gross_amount for item in result.settled.get(settlement_date, [])),
            Decimal("0"),
        )

    def set_override(
        self,
        settlement_date: date,
        income_source_id: int,
        override_amount: Decimal,
        note: Optional[str] = None,
    ) -> int:
        """Create or replace the override for a source on a settlement date.

        The gross amount computed for that date is stored alongside, so the
        correction can be reviewed later.

        Args:
            settlement_date: Date the funds land in the bank
            income_source_id: Income source ID
            override_amount: Net amount actually received
            note: Optional free-text note

        Returns:
            Override ID

        Raises:
            NotFoundError: If the income source does not exist
            ValidationError: If the amount is negative
        """
        if override_amount < 0:
            raise ValidationError("Override amount cannot be negative")
        original_amount = self.computed_gross(settlement_date, income_source_id)
        return self.db.upsert_override(
            settlement_date=settlement_date,
            income_source_id=income_source_id,
            override_amount=override_amount,
            note=note or None,
            original_amount=original_amount,
        )

    def get_override(self, settlement_date: date, income_source_id: int) -> Optional[SettlementOverride]:
        """Get the override for a source on a settlement date."""
        return self.db.get_override(settlement_date, income_source_id)

    def list_overrides(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[SettlementOverride]:
        """List overrides in a settlement date range."""
        return self.db.list_overrides(start_date=start_date, end_date=end_date)

    def clear_override(self, settlement_date: date, income_source_id: int) -> None:
        """Remove an override so the computed amount applies again.

        Raises:
            NotFoundError: If there is no such override
        """
        self.db.delete_override(settlement_date, income_source_id)


class SettingsService:
    """Service for the opening balance that anchors cumulative balances."""

    def __init__(self, db: Database):
        """Initialize settings service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_settings(self) -> Optional[CashflowSettings]:
        """Get the saved opening balance, if any."""
        return self.db.get_cashflow_settings()

    def set_opening_balance(self, opening_balance: Decimal, opening_date: date) -> None:
        """Save the bank balance at the start of the report window."""
        self.db.save_cashflow_settings(opening_balance=opening_balance, opening_date=opening_date)
