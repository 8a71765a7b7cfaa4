"""Expense (supplier payment) domain service."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from cashflow.database.base import Database
from cashflow.domain import errors
from cashflow.domain.entities import DEFAULT_PAYMENT_METHOD, ExpenseItem
from cashflow.domain.errors import NotFoundError, ValidationError

PAYMENT_METHODS = (
    "bank_transfer",
    "cash",
    "check",
    "bit",
    "paybox",
    "credit_card",
    "credit_companies",
    "standing_order",
    "other",
)

CENT = Decimal("0.01")


def split_installments(
    total: Decimal, installments: int, first_due_date: date
) -> list[tuple[Decimal, date]]:
    """Split a total into monthly installments.

    Each installment is rounded to the cent and the last one takes the
    remainder, so the installments always add up to the total.

    Args:
        total: Amount to split
        installments: Number of installments
        first_due_date: Due date of the first installment

    Returns:
        List of (amount, due date) pairs

    Raises:
        ValidationError: If installments is less than 1
    """
    if installments < 1:
        raise ValidationError("Number of installments must be at least 1")
    if installments == 1:
        return [(total, first_due_date)]

    amount = (total / installments).quantize(CENT, rounding=ROUND_HALF_UP)
    last_amount = total - amount * (installments - 1)
    return [
        (
            last_amount if number == installments - 1 else amount,
            first_due_date + relativedelta(months=number),
        )
        for number in range(installments)
    ]


class ExpenseService:
    """Service for recording supplier payments and listing what falls due."""

    def __init__(self, db: Database):
        """Initialize expense service.

        Args:
            db: Database instance
        """
        self.db = db

    def record_payment(
        self,
        supplier_name: str,
        amount: Decimal,
        due_date: date,
        payment_method: str = DEFAULT_PAYMENT_METHOD,
        installments: int = 1,
        payment_date: Optional[date] = None,
    ) -> int:
        """Record a supplier payment, split into monthly installments.

        Args:
            supplier_name: Supplier name (created if new)
            amount: Total amount
            due_date: Due date of the first installment
            payment_method: How the payment is made
            installments: Number of monthly installments
            payment_date: Date the payment was recorded (defaults to due_date)

        Returns:
            Payment ID

        Raises:
            ValidationError: If the supplier name, amount, method or
                installment count is invalid
        """
        supplier_name = supplier_name.strip()
        if not supplier_name:
            raise ValidationError("Supplier name cannot be empty")
        if amount <= 0:
            raise ValidationError("Payment amount must be positive")
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                f"Unknown payment method '{payment_method}'. Supported: {', '.join(PAYMENT_METHODS)}"
            )

        splits = [
            (split_amount, payment_method, split_due)
            for split_amount, split_due in split_installments(amount, installments, due_date)
        ]
        supplier_id = self.db.get_or_create_supplier(supplier_name)
        return self.db.create_payment(
            supplier_id=supplier_id,
            payment_date=payment_date or due_date,
            splits=splits,
        )

    def list_expenses(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[ExpenseItem]:
        """List expense items due in a date range."""
        return self.db.list_expense_items(start_date=start_date, end_date=end_date)

    def delete_payment(self, payment_id: int) -> None:
        """Delete a payment and all its installments.

        Raises:
            NotFoundError: If the payment does not exist or is already deleted
        """
        payment = self.db.get_payment(payment_id)
        if payment is None or payment.deleted_at is not None:
            raise NotFoundError(errors.payment_not_found(payment_id))
        self.db.soft_delete_payment(payment_id)
