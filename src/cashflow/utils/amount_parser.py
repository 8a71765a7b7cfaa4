"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from cashflow.domain.errors import ValidationError


def parse_amount(amount_str: str | int | float | Decimal) -> Decimal:
    """Parse an amount into a Decimal.

    Handles various formats:
    - "123.45"
    - "₪123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Numbers are accepted as-is; floats go through ``str`` so that 0.1 stays
    0.1 rather than its binary expansion.

    Args:
        amount_str: Amount string or number

    Returns:
        Decimal amount

    Raises:
        ValidationError: If amount cannot be parsed
    """
    if isinstance(amount_str, bool):
        raise ValidationError(f"Could not parse amount {amount_str!r}")
    if isinstance(amount_str, Decimal):
        amount = amount_str
        if not amount.is_finite():
            raise ValidationError(f"Could not parse amount '{amount_str}'")
        return amount
    if isinstance(amount_str, (int, float)):
        return parse_amount(str(amount_str))
    if not isinstance(amount_str, str) or not amount_str.strip():
        raise ValidationError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = re.sub(r"[₪$€£]", "", amount_str)

    # Remove commas
    amount_str = amount_str.replace(",", "")

    # Remove whitespace again
    amount_str = amount_str.strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValidationError(f"Could not parse amount '{amount_str}': {e!r}")
    if not amount.is_finite():
        raise ValidationError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount
