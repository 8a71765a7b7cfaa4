"""SQLAlchemy models for cashflow database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class IncomeSource(Base):
    """Income source model with flat settlement rule columns."""

    __tablename__ = "income_sources"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    # NULL settlement_type means no rule is configured
    settlement_type = Column(String, nullable=True)
    settlement_delay_days = Column(Integer, default=1, nullable=False)
    settlement_day_of_week = Column(Integer, nullable=True)
    settlement_day_of_month = Column(Integer, nullable=True)
    bimonthly_first_cutoff = Column(Integer, nullable=True)
    bimonthly_first_settlement = Column(Integer, nullable=True)
    bimonthly_second_settlement = Column(Integer, nullable=True)
    coupon_settlement_date = Column(Integer, nullable=True)
    commission_rate = Column(Numeric(6, 3), default=0, nullable=False)
    fixed_fee = Column(Numeric(10, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    entries = relationship("DailyIncomeEntry", back_populates="income_source")


class DailyIncomeEntry(Base):
    """Income recorded for a source on a business day."""

    __tablename__ = "daily_income_entries"

    id = Column(Integer, primary_key=True)
    income_source_id = Column(Integer, ForeignKey("income_sources.id"), nullable=False)
    entry_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    income_source = relationship("IncomeSource", back_populates="entries")


class Supplier(Base):
    """Supplier model."""

    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    payments = relationship("Payment", back_populates="supplier")


class Payment(Base):
    """Supplier payment model."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    payment_date = Column(Date, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    supplier = relationship("Supplier", back_populates="payments")
    splits = relationship("PaymentSplit", back_populates="payment", cascade="all, delete-orphan")


class PaymentSplit(Base):
    """Installment of a payment with its own method and due date."""

    __tablename__ = "payment_splits"

    id = Column(Integer, primary_key=True)
    payment_id = Column(Integer, ForeignKey("payments.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String, default="other", nullable=False)
    due_date = Column(Date, nullable=False)
    installment_number = Column(Integer, default=1, nullable=False)
    installments_count = Column(Integer, default=1, nullable=False)

    # Relationships
    payment = relationship("Payment", back_populates="splits")


class SettlementOverride(Base):
    """Manual net amount for a source on a settlement date."""

    __tablename__ = "settlement_overrides"

    id = Column(Integer, primary_key=True)
    settlement_date = Column(Date, nullable=False)
    income_source_id = Column(Integer, ForeignKey("income_sources.id"), nullable=False)
    original_amount = Column(Numeric(12, 2), nullable=True)
    override_amount = Column(Numeric(12, 2), nullable=False)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One override per settlement date and source
    __table_args__ = (
        UniqueConstraint("settlement_date", "income_source_id", name="uq_override_date_source"),
    )


class CashflowSettings(Base):
    """Opening balance settings (single row)."""

    __tablename__ = "cashflow_settings"

    id = Column(Integer, primary_key=True)
    opening_balance = Column(Numeric(12, 2), nullable=False)
    opening_date = Column(Date, nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
