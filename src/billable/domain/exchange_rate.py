"""Exchange rate domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from billable.database.base import Database
from billable.domain.entities import ExchangeRate as ExchangeRateEntity
from billable.domain.validation import (
    add_error,
    check_currency,
    check_minimum,
    check_present,
    raise_if_errors,
)

logger = logging.getLogger(__name__)


class ExchangeRateService:
    """Service for dated exchange rates into the main currency."""

    def __init__(self, db: Database):
        """Initialize exchange rate service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_rate(self, currency: str, rate_date: date, rate: Decimal, amount: int = 1) -> int:
        """Record that ``amount`` units of ``currency`` cost ``rate`` main-currency units.

        Args:
            currency: ISO code of the foreign currency
            rate_date: Day the rate applies to
            rate: Main-currency value of ``amount`` units
            amount: Lot size the rate is quoted for (e.g. 100 for JPY)

        Returns:
            Exchange rate ID

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If a rate for the currency and day already exists
        """
        field_errors: dict[str, list[str]] = {}
        check_present(field_errors, "currency", currency)
        check_currency(field_errors, "currency", currency)
        if rate is None:
            add_error(field_errors, "rate", "can't be blank")
        check_minimum(field_errors, "rate", rate, inclusive=False)
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            add_error(field_errors, "amount", "must be a positive whole number")
        if rate_date is None:
            add_error(field_errors, "date", "can't be blank")
        raise_if_errors(field_errors)

        rate_id = self.db.create_exchange_rate(currency=currency, date=rate_date, rate=rate, amount=amount)
        logger.info("Recorded %s rate %s/%s for %s", currency, rate, amount, rate_date)
        return rate_id

    def get_rate(self, currency: str, rate_date: date) -> Optional[ExchangeRateEntity]:
        """Rate for exactly ``rate_date``; no nearest-date fallback."""
        return self.db.get_exchange_rate(currency, rate_date)

    def list_rates(self, currency: Optional[str] = None) -> list[ExchangeRateEntity]:
        """List rates, newest first."""
        return self.db.list_exchange_rates(currency=currency)
