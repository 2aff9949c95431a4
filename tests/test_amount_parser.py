"""Tests for amount parsing."""

from decimal import Decimal

import pytest

from smartledger.utils.amount_parser import MAX_AMOUNT, parse_amount, to_money


@pytest.mark.parametrize(
    "value, expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("+50", Decimal("50")),
        ("$1,234.56", Decimal("1234.56")),
        ("€ 1.500,50", Decimal("1500.50")),
        ("1.234,56", Decimal("1234.56")),
        ("1234,56", Decimal("1234.56")),
        ("1,234", Decimal("1234")),
        ("1.234.567", Decimal("1234567")),
        ("(75.00)", Decimal("-75.00")),
        ("75.00-", Decimal("-75.00")),
        ("EUR 12,5", Decimal("12.5")),
        ("1 234,00", Decimal("1234.00")),
    ],
)
def test_parse_amount_strings(value, expected):
    """Test US and European number formats."""
    assert parse_amount(value) == expected


def test_parse_amount_numbers():
    """Test numeric inputs keep their decimal value."""
    assert parse_amount(100) == Decimal("100")
    assert parse_amount(0.1) == Decimal("0.1")
    assert parse_amount(Decimal("40.00")) == Decimal("40.00")


@pytest.mark.parametrize(
    "value", ["", "   ", "abc", "12..3,4,5x", None, True, float("nan"), "inf", "1e400", "1E5", "-2.5e3", "0x10"]
)
def test_parse_amount_invalid(value):
    """Test unparsable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("10.005"), Decimal("10.00")),
        (Decimal("10.015"), Decimal("10.02")),
        (Decimal("7"), Decimal("7.00")),
        (MAX_AMOUNT, MAX_AMOUNT),
    ],
)
def test_to_money_rounds_half_even(value, expected):
    assert to_money(value) == expected


@pytest.mark.parametrize(
    "value",
    [Decimal("1e400"), Decimal("12345678901234567.89"), Decimal("999999999999.995"), Decimal("Infinity")],
)
def test_to_money_rejects_out_of_range(value):
    with pytest.raises(ValueError, match="out of range"):
        to_money(value)
