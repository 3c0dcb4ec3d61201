"""Tests for ExchangeRateService."""

from datetime import date
from decimal import Decimal

import pytest

from billable.domain import errors


def test_add_and_get(exchange_rate_service):
    exchange_rate_service.add_rate("JPY", date(2024, 4, 1), Decimal("15.30"), amount=100)

    rate = exchange_rate_service.get_rate("JPY", date(2024, 4, 1))
    assert rate.rate == Decimal("15.30")
    assert rate.amount == 100
    assert rate.unit_rate == Decimal("0.153")


def test_lookup_is_exact_date(exchange_rate_service):
    """There is no nearest-date fallback."""
    exchange_rate_service.add_rate("EUR", date(2024, 4, 1), Decimal("25.125"))

    assert exchange_rate_service.get_rate("EUR", date(2024, 4, 2)) is None


def test_one_rate_per_currency_and_day(exchange_rate_service):
    exchange_rate_service.add_rate("EUR", date(2024, 4, 1), Decimal("25.125"))

    with pytest.raises(errors.ConflictError, match="already exists"):
        exchange_rate_service.add_rate("EUR", date(2024, 4, 1), Decimal("25.2"))


@pytest.mark.parametrize(
    "currency,rate,amount,field",
    [
        ("eur", Decimal("25"), 1, "currency"),
        ("EUR", Decimal("0"), 1, "rate"),
        ("EUR", None, 1, "rate"),
        ("EUR", Decimal("25"), 0, "amount"),
        ("EUR", Decimal("25"), Decimal("1.5"), "amount"),
    ],
)
def test_validation(exchange_rate_service, currency, rate, amount, field):
    with pytest.raises(errors.ValidationError) as exc_info:
        exchange_rate_service.add_rate(currency, date(2024, 4, 1), rate, amount=amount)

    assert field in exc_info.value.errors


def test_list_newest_first(exchange_rate_service):
    exchange_rate_service.add_rate("EUR", date(2024, 4, 1), Decimal("25"))
    exchange_rate_service.add_rate("EUR", date(2024, 4, 2), Decimal("25.1"))
    exchange_rate_service.add_rate("USD", date(2024, 4, 3), Decimal("23"))

    assert [rate.date for rate in exchange_rate_service.list_rates(currency="EUR")] == [
        date(2024, 4, 2),
        date(2024, 4, 1),
    ]
    assert len(exchange_rate_service.list_rates()) == 3
