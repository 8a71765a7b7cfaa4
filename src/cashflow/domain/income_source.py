"""Income source domain service."""

from decimal import Decimal
from typing import Optional

from cashflow.database.base import Database
from cashflow.domain import errors
from cashflow.domain.entities import IncomeSource, SettlementRule, SettlementType
from cashflow.domain.errors import ConflictError, NotFoundError, ValidationError


def validate_rule(rule: SettlementRule) -> None:
    """Check that settlement rule parameters are within range.

    Raises:
        ValidationError: If a parameter is out of range
    """
    try:
        SettlementType(rule.settlement_type)
    except ValueError:
        raise ValidationError(f"Unknown settlement type '{rule.settlement_type}'") from None

    if rule.delay_days < 0:
        raise ValidationError("Settlement delay cannot be negative")
    if not 0 <= rule.day_of_week <= 6:
        raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)")

    days_of_month = {
        "day of month": rule.day_of_month,
        "bimonthly cutoff": rule.bimonthly_first_cutoff,
        "first bimonthly settlement": rule.bimonthly_first_settlement,
        "second bimonthly settlement": rule.bimonthly_second_settlement,
        "coupon settlement day": rule.coupon_settlement_day,
    }
    for label, value in days_of_month.items():
        if not 1 <= value <= 31:
            raise ValidationError(f"The {label} must be between 1 and 31")

    if not Decimal("0") <= Decimal(rule.commission_rate) <= Decimal("100"):
        raise ValidationError("Commission rate must be between 0 and 100 percent")
    if Decimal(rule.fixed_fee) < 0:
        raise ValidationError("Fixed fee cannot be negative")


class IncomeSourceService:
    """Service for managing income sources and their settlement rules."""

    def __init__(self, db: Database):
        """Initialize income source service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_income_source(self, name: str, rule: Optional[SettlementRule] = None) -> int:
        """Create a new income source.

        Args:
            name: Income source name
            rule: Settlement rule, or None to settle same-day with a warning

        Returns:
            Income source ID

        Raises:
            ValidationError: If the name is empty or the rule is invalid
            ConflictError: If an income source with the name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Income source name cannot be empty")
        if rule is not None:
            validate_rule(rule)
        if self.db.get_income_source_by_name(name) is not None:
            raise ConflictError(errors.duplicate_income_source(name))

        return self.db.create_income_source(name=name, rule=rule)

    def get_income_source(self, source_id: int) -> Optional[IncomeSource]:
        """Get income source by ID.

        Args:
            source_id: Income source ID

        Returns:
            IncomeSource entity or None if not found
        """
        return self.db.get_income_source(source_id)

    def get_income_source_by_name(self, name: str) -> Optional[IncomeSource]:
        """Get income source by name."""
        return self.db.get_income_source_by_name(name)

    def list_income_sources(self, include_inactive: bool = False) -> list[IncomeSource]:
        """List income sources.

        Args:
            include_inactive: If True, include deactivated sources

        Returns:
            List of income source entities
        """
        return self.db.list_income_sources(include_inactive=include_inactive)

    def set_rule(self, source_id: int, rule: Optional[SettlementRule]) -> None:
        """Replace the settlement rule of an income source.

        Raises:
            NotFoundError: If the income source does not exist
            ValidationError: If the rule is invalid
        """
        if self.db.get_income_source(source_id) is None:
            raise NotFoundError(errors.income_source_not_found(source_id))
        if rule is not None:
            validate_rule(rule)
        self.db.update_income_source_rule(source_id, rule)

    def deactivate(self, source_id: int) -> None:
        """Deactivate an income source.

        Its past entries keep settling, under the generic "other" name.

        Raises:
            NotFoundError: If the income source does not exist
        """
        if self.db.get_income_source(source_id) is None:
            raise NotFoundError(errors.income_source_not_found(source_id))
        self.db.set_income_source_active(source_id, False)

    def activate(self, source_id: int) -> None:
        """Reactivate an income source.

        Raises:
            NotFoundError: If the income source does not exist
        """
        if self.db.get_income_source(source_id) is None:
            raise NotFoundError(errors.income_source_not_found(source_id))
        self.db.set_income_source_active(source_id, True)
