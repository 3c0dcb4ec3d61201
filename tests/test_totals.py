"""Tests for invoice totals arithmetic."""

from dataclasses import dataclass
from decimal import Decimal

from billable.domain import totals


@dataclass
class Line:
    amount: Decimal
    vat_rate: Decimal


LINES = [
    Line(Decimal("500"), Decimal("21")),
    Line(Decimal("300"), Decimal("21")),
    Line(Decimal("200"), Decimal("0")),
]


def test_subtotal_vat_and_grand_total():
    """500/300/200 at 21/21/0 percent."""
    assert totals.subtotal(LINES) == Decimal("1000.00")
    assert totals.total_vat(LINES) == Decimal("168.00")
    assert totals.grand_total(LINES) == Decimal("1168.00")


def test_vat_totals_by_rate_keeps_zero_rate():
    """A 0% group is reported with a zero value."""
    grouped = totals.vat_totals_by_rate(LINES)

    assert grouped == {Decimal("21"): Decimal("168.00"), Decimal("0"): Decimal("0.00")}
    assert sum(grouped.values()) == totals.total_vat(LINES)


def test_empty_invoice_totals():
    """No lines means zero everywhere."""
    assert totals.subtotal([]) == 0
    assert totals.total_vat([]) == 0
    assert totals.grand_total([]) == 0
    assert totals.vat_totals_by_rate([]) == {}


def test_line_vat_rounds_half_up():
    """VAT per line is rounded to cents, half up."""
    assert totals.line_vat(Decimal("0.10"), Decimal("25")) == Decimal("0.03")
    assert totals.line_vat(Decimal("33.33"), Decimal("21")) == Decimal("7.00")


def test_grand_total_is_subtotal_plus_vat():
    """Holds for awkward amounts too."""
    lines = [Line(Decimal("33.33"), Decimal("21")), Line(Decimal("0.05"), Decimal("10")), Line(Decimal("7"), Decimal("15"))]

    assert totals.subtotal(lines) + totals.total_vat(lines) == totals.grand_total(lines)
    assert sum(totals.vat_totals_by_rate(lines).values()) == totals.total_vat(lines)


def test_round_money_places():
    """Rounding honours the number of places."""
    assert totals.round_money(Decimal("1530.0049")) == Decimal("1530.00")
    assert totals.round_money(Decimal("2.5"), 0) == Decimal("3")
