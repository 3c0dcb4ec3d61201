"""Tests for amount and payment terms parsing."""

from decimal import Decimal

import pytest

from billable.utils.amount_parser import parse_amount
from billable.utils.payment_terms import parse_payment_terms


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("(123.45)", Decimal("-123.45")),
        ("1,234.56", Decimal("1234.56")),
        ("1234,5", Decimal("1234.5")),
        ("€123.45", Decimal("123.45")),
        ("123.45 EUR", Decimal("123.45")),
        ("1 234,50 Kč", Decimal("1234.50")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "1.2.3", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Net 30", 30),
        ("net 14 days", 14),
        ("30 days", 30),
        ("30", 30),
        ("1 day", 1),
        ("", None),
        (None, None),
        ("Due on receipt", None),
        ("2/10 net 30", None),
    ],
)
def test_parse_payment_terms(text, expected):
    assert parse_payment_terms(text) == expected
