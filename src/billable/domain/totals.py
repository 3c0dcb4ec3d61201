"""Invoice totals: subtotal, VAT and grand total over line items.

Works on anything with ``amount`` and ``vat_rate`` attributes so the same
arithmetic serves persisted line items and previews.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Protocol

CENT = Decimal("0.01")
ZERO = Decimal("0")


class Taxable(Protocol):
    amount: Decimal
    vat_rate: Decimal


def round_money(value: Decimal, places: int = 2) -> Decimal:
    """Round half up to ``places`` decimal places."""
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def line_vat(amount: Optional[Decimal], vat_rate: Optional[Decimal]) -> Decimal:
    """VAT owed on a single line, rounded to cents."""
    if not amount or not vat_rate:
        return round_money(ZERO)
    return round_money(amount * vat_rate / Decimal(100))


def subtotal(items: Iterable[Taxable]) -> Decimal:
    return sum((item.amount or ZERO for item in items), ZERO)


def total_vat(items: Iterable[Taxable]) -> Decimal:
    return sum((line_vat(item.amount, item.vat_rate) for item in items), round_money(ZERO))


def grand_total(items: Iterable[Taxable]) -> Decimal:
    items = list(items)
    return subtotal(items) + total_vat(items)


def vat_totals_by_rate(items: Iterable[Taxable]) -> dict[Decimal, Decimal]:
    """Group VAT owed by rate.

    Every rate carried by a line appears as a key, including 0% with a zero
    value. Values sum exactly to :func:`total_vat`.
    """
    grouped: dict[Decimal, Decimal] = {}
    for item in items:
        rate = item.vat_rate if item.vat_rate is not None else ZERO
        grouped[rate] = grouped.get(rate, round_money(ZERO)) + line_vat(item.amount, rate)
    return grouped
