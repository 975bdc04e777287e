"""Amount and quantity parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "₹123.45" or "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[₹$€£¥]|Rs\.?", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e!r}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_quantity(quantity_str: str) -> int:
    """Parse a whole-number unit count such as "120" or "1,200".

    Raises:
        ValueError: If the string is empty or not a whole number
    """
    if not quantity_str or not quantity_str.strip():
        raise ValueError("Empty quantity string")

    cleaned = quantity_str.strip().replace(",", "")
    if not re.fullmatch(r"[+-]?\d+", cleaned):
        raise ValueError(f"Could not parse quantity '{quantity_str.strip()}'")
    return int(cleaned)
