"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so settlement rules can stay a
single value object in the domain while the schema keeps them as flat
columns on the income source row.
"""

from decimal import Decimal
from typing import Any, Optional

from cashflow.domain import entities as domain
from cashflow.database.models import (
    CashflowSettings as ORMCashflowSettings,
    DailyIncomeEntry as ORMDailyIncomeEntry,
    IncomeSource as ORMIncomeSource,
    Payment as ORMPayment,
    PaymentSplit as ORMPaymentSplit,
    SettlementOverride as ORMSettlementOverride,
    Supplier as ORMSupplier,
)

DEFAULT_RULE = domain.SettlementRule()


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def rule_to_domain(orm_source: ORMIncomeSource) -> Optional[domain.SettlementRule]:
    """Build the settlement rule stored on an income source row."""
    if orm_source.settlement_type is None:
        return None
    return domain.SettlementRule(
        settlement_type=domain.SettlementType(orm_source.settlement_type),
        delay_days=_or_default(orm_source.settlement_delay_days, DEFAULT_RULE.delay_days),
        day_of_week=_or_default(orm_source.settlement_day_of_week, DEFAULT_RULE.day_of_week),
        day_of_month=_or_default(orm_source.settlement_day_of_month, DEFAULT_RULE.day_of_month),
        bimonthly_first_cutoff=_or_default(
            orm_source.bimonthly_first_cutoff, DEFAULT_RULE.bimonthly_first_cutoff
        ),
        bimonthly_first_settlement=_or_default(
            orm_source.bimonthly_first_settlement, DEFAULT_RULE.bimonthly_first_settlement
        ),
        bimonthly_second_settlement=_or_default(
            orm_source.bimonthly_second_settlement, DEFAULT_RULE.bimonthly_second_settlement
        ),
        coupon_settlement_day=_or_default(
            orm_source.coupon_settlement_date, DEFAULT_RULE.coupon_settlement_day
        ),
        commission_rate=Decimal(_or_default(orm_source.commission_rate, 0)),
        fixed_fee=Decimal(_or_default(orm_source.fixed_fee, 0)),
    )


def rule_to_columns(rule: Optional[domain.SettlementRule]) -> dict[str, Any]:
    """Flatten a settlement rule into income source column values."""
    if rule is None:
        return {
            "settlement_type": None,
            "settlement_delay_days": DEFAULT_RULE.delay_days,
            "settlement_day_of_week": None,
            "settlement_day_of_month": None,
            "bimonthly_first_cutoff": None,
            "bimonthly_first_settlement": None,
            "bimonthly_second_settlement": None,
            "coupon_settlement_date": None,
            "commission_rate": Decimal("0"),
            "fixed_fee": Decimal("0"),
        }
    return {
        "settlement_type": domain.SettlementType(rule.settlement_type).value,
        "settlement_delay_days": rule.delay_days,
        "settlement_day_of_week": rule.day_of_week,
        "settlement_day_of_month": rule.day_of_month,
        "bimonthly_first_cutoff": rule.bimonthly_first_cutoff,
        "bimonthly_first_settlement": rule.bimonthly_first_settlement,
        "bimonthly_second_settlement": rule.bimonthly_second_settlement,
        "coupon_settlement_date": rule.coupon_settlement_day,
        "commission_rate": rule.commission_rate,
        "fixed_fee": rule.fixed_fee,
    }


def income_source_to_domain(orm_source: ORMIncomeSource) -> domain.IncomeSource:
    """Convert SQLAlchemy IncomeSource model to domain IncomeSource entity."""
    return domain.IncomeSource(
        id=orm_source.id,
        name=orm_source.name,
        is_active=orm_source.is_active,
        rule=rule_to_domain(orm_source),
    )


def income_entry_to_domain(orm_entry: ORMDailyIncomeEntry) -> domain.DailyIncomeEntry:
    """Convert SQLAlchemy DailyIncomeEntry model to domain entity."""
    return domain.DailyIncomeEntry(
        id=orm_entry.id,
        entry_date=orm_entry.entry_date,
        income_source_id=orm_entry.income_source_id,
        amount=orm_entry.amount,
    )


def supplier_to_domain(orm_supplier: ORMSupplier) -> domain.Supplier:
    """Convert SQLAlchemy Supplier model to domain Supplier entity."""
    return domain.Supplier(
        id=orm_supplier.id,
        name=orm_supplier.name,
        created_at=orm_supplier.created_at,
    )


def payment_to_domain(orm_payment: ORMPayment) -> domain.Payment:
    """Convert SQLAlchemy Payment model to domain Payment entity."""
    return domain.Payment(
        id=orm_payment.id,
        supplier_id=orm_payment.supplier_id,
        total_amount=orm_payment.total_amount,
        payment_date=orm_payment.payment_date,
        created_at=orm_payment.created_at,
        deleted_at=orm_payment.deleted_at,
    )


def payment_split_to_expense(orm_split: ORMPaymentSplit) -> domain.ExpenseItem:
    """Convert SQLAlchemy PaymentSplit (with its payment) to an ExpenseItem."""
    supplier = orm_split.payment.supplier if orm_split.payment is not None else None
    return domain.ExpenseItem(
        id=orm_split.id,
        supplier_name=supplier.name if supplier is not None else domain.UNKNOWN_SUPPLIER_NAME,
        amount=orm_split.amount,
        payment_method=orm_split.payment_method or domain.DEFAULT_PAYMENT_METHOD,
        due_date=orm_split.due_date,
        payment_id=orm_split.payment_id,
        installment_number=orm_split.installment_number,
        installments_count=orm_split.installments_count,
    )


def override_to_domain(orm_override: ORMSettlementOverride) -> domain.SettlementOverride:
    """Convert SQLAlchemy SettlementOverride model to domain entity."""
    return domain.SettlementOverride(
        id=orm_override.id,
        settlement_date=orm_override.settlement_date,
        income_source_id=orm_override.income_source_id,
        override_amount=orm_override.override_amount,
        note=orm_override.note,
        original_amount=orm_override.original_amount,
    )


def settings_to_domain(orm_settings: ORMCashflowSettings) -> domain.CashflowSettings:
    """Convert SQLAlchemy CashflowSettings model to domain entity."""
    return domain.CashflowSettings(
        opening_balance=orm_settings.opening_balance,
        opening_date=orm_settings.opening_date,
    )
