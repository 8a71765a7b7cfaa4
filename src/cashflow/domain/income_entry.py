"""Income entry domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from cashflow.database.base import Database
from cashflow.domain import errors
from cashflow.domain.entities import DailyIncomeEntry
from cashflow.domain.errors import NotFoundError, ValidationError


class IncomeEntryService:
    """Service for recording daily income per source."""

    def __init__(self, db: Database):
        """Initialize income entry service.

        Args:
            db: Database instance
        """
        self.db = db

    def record_income(self, income_source_id: int, entry_date: date, amount: Decimal) -> int:
        """Record income for a source on a business day.

        Args:
            income_source_id: Income source ID
            entry_date: Business day the income was taken
            amount: Gross amount

        Returns:
            Income entry ID

        Raises:
            NotFoundError: If the income source does not exist
            ValidationError: If the amount is negative
        """
        if self.db.get_income_source(income_source_id) is None:
            raise NotFoundError(errors.income_source_not_found(income_source_id))
        if amount < 0:
            raise ValidationError("Income amount cannot be negative")

        return self.db.create_income_entry(
            income_source_id=income_source_id, entry_date=entry_date, amount=amount
        )

    def list_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        income_source_id: Optional[int] = None,
    ) -> list[DailyIncomeEntry]:
        """List income entries in a date range."""
        return self.db.list_income_entries(
            start_date=start_date, end_date=end_date, income_source_id=income_source_id
        )

    def delete_entry(self, entry_id: int) -> None:
        """Delete an income entry.

        Raises:
            NotFoundError: If the entry does not exist
        """
        if self.db.get_income_entry(entry_id) is None:
            raise NotFoundError(errors.entry_not_found(entry_id))
        self.db.delete_income_entry(entry_id)
