"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid pulling in domain services
from cashflow.domain.entities import (
    CashflowSettings,
    DailyIncomeEntry,
    ExpenseItem,
    IncomeSource,
    Payment,
    SettlementOverride,
    SettlementRule,
    Supplier,
)


class Database(ABC):
    """Abstract database interface for cashflow."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Income source operations
    @abstractmethod
    def create_income_source(self, name: str, rule: Optional[SettlementRule] = None) -> int:
        """Create an income source. Returns income source ID."""
        pass

    @abstractmethod
    def get_income_source(self, source_id: int) -> Optional[IncomeSource]:
        """Get income source by ID."""
        pass

    @abstractmethod
    def get_income_source_by_name(self, name: str) -> Optional[IncomeSource]:
        """Get income source by name."""
        pass

    @abstractmethod
    def list_income_sources(self, include_inactive: bool = False) -> list[IncomeSource]:
        """List income sources, active ones only unless include_inactive."""
        pass

    @abstractmethod
    def update_income_source_rule(self, source_id: int, rule: Optional[SettlementRule]) -> None:
        """Replace the settlement rule of an income source."""
        pass

    @abstractmethod
    def set_income_source_active(self, source_id: int, is_active: bool) -> None:
        """Activate or deactivate an income source."""
        pass

    # Income entry operations
    @abstractmethod
    def create_income_entry(self, income_source_id: int, entry_date: date, amount: Decimal) -> int:
        """Record income for a source on a day. Returns entry ID."""
        pass

    @abstractmethod
    def get_income_entry(self, entry_id: int) -> Optional[DailyIncomeEntry]:
        """Get income entry by ID."""
        pass

    @abstractmethod
    def list_income_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        income_source_id: Optional[int] = None,
    ) -> list[DailyIncomeEntry]:
        """List income entries by entry date, optionally filtered."""
        pass

    @abstractmethod
    def delete_income_entry(self, entry_id: int) -> None:
        """Delete an income entry."""
        pass

    # Supplier and payment operations
    @abstractmethod
    def get_or_create_supplier(self, name: str) -> int:
        """Get supplier ID by name, creating the supplier if needed."""
        pass

    @abstractmethod
    def list_suppliers(self) -> list[Supplier]:
        """List all suppliers."""
        pass

    @abstractmethod
    def create_payment(
        self,
        supplier_id: int,
        payment_date: date,
        splits: list[tuple[Decimal, str, date]],
    ) -> int:
        """Create a payment with its (amount, method, due date) splits. Returns payment ID."""
        pass

    @abstractmethod
    def get_payment(self, payment_id: int) -> Optional[Payment]:
        """Get payment by ID."""
        pass

    @abstractmethod
    def soft_delete_payment(self, payment_id: int) -> None:
        """Mark a payment as deleted; its splits stop counting as expenses."""
        pass

    @abstractmethod
    def list_expense_items(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[ExpenseItem]:
        """List splits of non-deleted payments due in a date range."""
        pass

    # Settlement override operations
    @abstractmethod
    def upsert_override(
        self,
        settlement_date: date,
        income_source_id: int,
        override_amount: Decimal,
        note: Optional[str] = None,
        original_amount: Optional[Decimal] = None,
    ) -> int:
        """Create or replace the override for (date, source). Returns override ID."""
        pass

    @abstractmethod
    def get_override(self, settlement_date: date, income_source_id: int) -> Optional[SettlementOverride]:
        """Get the override for (date, source)."""
        pass

    @abstractmethod
    def list_overrides(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[SettlementOverride]:
        """List overrides by settlement date."""
        pass

    @abstractmethod
    def delete_override(self, settlement_date: date, income_source_id: int) -> None:
        """Delete the override for (date, source)."""
        pass

    # Settings operations
    @abstractmethod
    def get_cashflow_settings(self) -> Optional[CashflowSettings]:
        """Get opening balance settings, if saved."""
        pass

    @abstractmethod
    def save_cashflow_settings(self, opening_balance: Decimal, opening_date: date) -> None:
        """Create or replace opening balance settings."""
        pass
