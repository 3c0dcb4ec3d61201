"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "€123.45", "123.45 EUR", "1 234,50 Kč"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    A single comma with no dot is read as the decimal separator
    ("1234,5" -> 1234.5); otherwise commas are thousands separators.

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

    # Remove currency symbols and ISO codes
    amount_str = re.sub(r"[$€£¥]|Kč|\b[A-Z]{3}\b", "", amount_str)

    # Remove whitespace, including non-breaking thousands separators
    amount_str = re.sub(r"\s+", "", amount_str)

    if "," in amount_str and "." not in amount_str and amount_str.count(",") == 1:
        amount_str = amount_str.replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount
