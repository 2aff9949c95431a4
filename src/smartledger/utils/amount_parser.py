"""Amount parsing utilities."""

import re
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any

_CURRENCY = re.compile(r"[$€£¥]|\b(?:EUR|USD|GBP)\b", re.IGNORECASE)
_PLAIN_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")

# Largest magnitude a Numeric(14, 2) column holds
MAX_AMOUNT = Decimal("999999999999.99")
CENT = Decimal("0.01")


def parse_amount(value: Any) -> Decimal:
    """Parse an amount into a Decimal.

    Handles:
    - int, float and Decimal values
    - "123.45", "-123.45", "$123.45", "€ 1.500,50"
    - "1,234.56" (comma thousands) and "1.234,56" (dot thousands)
    - "1234,56" (comma decimal)
    - "(123.45)" and "123.45-" (negative)

    Args:
        value: Amount value

    Returns:
        Decimal amount, signed as written

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, bool):
        raise ValueError(f"Could not parse amount '{value}'")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # Go through str so 0.1 stays 0.1 instead of its binary expansion
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise ValueError(f"Could not parse amount '{value}'")
        return amount
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Empty amount string")

    amount_str = _CURRENCY.sub("", value).replace("\u00a0", "").replace(" ", "").strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]
    elif amount_str.endswith("-"):
        is_negative = True
        amount_str = amount_str[:-1]

    if amount_str.startswith("+"):
        amount_str = amount_str[1:]
    elif amount_str.startswith("-"):
        is_negative = not is_negative
        amount_str = amount_str[1:]

    amount_str = _normalize_separators(amount_str)
    if not _PLAIN_NUMBER.fullmatch(amount_str):
        raise ValueError(f"Could not parse amount '{value}'")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{value}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{value}'")
    return -amount if is_negative else amount


def _normalize_separators(amount_str: str) -> str:
    """Rewrite thousands/decimal separators into plain Decimal syntax."""
    has_comma = "," in amount_str
    has_dot = "." in amount_str

    if has_comma and has_dot:
        # Whichever separator comes last is the decimal point
        if amount_str.rfind(",") > amount_str.rfind("."):
            return amount_str.replace(".", "").replace(",", ".")
        return amount_str.replace(",", "")

    if has_comma:
        head, _, tail = amount_str.rpartition(",")
        if amount_str.count(",") == 1 and len(tail) in (1, 2):
            return f"{head}.{tail}"
        return amount_str.replace(",", "")

    if has_dot and amount_str.count(".") > 1:
        return amount_str.replace(".", "")

    return amount_str


def to_money(amount: Decimal) -> Decimal:
    """Round an amount to cents, rejecting values a money column cannot hold.

    Rounding is half-even (banker's rounding).

    Raises:
        ValueError: If the amount is not finite or exceeds MAX_AMOUNT
    """
    if not amount.is_finite() or abs(amount) > MAX_AMOUNT:
        raise ValueError(f"Amount '{amount}' is out of range")
    rounded = amount.quantize(CENT, rounding=ROUND_HALF_EVEN)
    if abs(rounded) > MAX_AMOUNT:
        raise ValueError(f"Amount '{amount}' is out of range")
    return rounded
