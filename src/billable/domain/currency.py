"""Conversion of invoice totals into the ledger's main currency."""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from billable.database.base import Database
from billable.domain.entities import Invoice, MainCurrencyTotal, Settings
from billable.domain.totals import round_money

logger = logging.getLogger(__name__)

DEFAULT_DECIMAL_PLACES = 2

# ISO 4217 minor units that differ from two decimal places
DECIMAL_PLACES = {
    "BIF": 0,
    "CLP": 0,
    "DJF": 0,
    "GNF": 0,
    "ISK": 0,
    "JPY": 0,
    "KMF": 0,
    "KRW": 0,
    "PYG": 0,
    "RWF": 0,
    "UGX": 0,
    "VND": 0,
    "VUV": 0,
    "XAF": 0,
    "XOF": 0,
    "XPF": 0,
    "BHD": 3,
    "IQD": 3,
    "JOD": 3,
    "KWD": 3,
    "LYD": 3,
    "OMR": 3,
    "TND": 3,
}


def decimal_places(currency: str) -> int:
    """Minor-unit precision of a currency."""
    return DECIMAL_PLACES.get(currency, DEFAULT_DECIMAL_PLACES)


class CurrencyConverter:
    """Convert invoice grand totals using the rate published on the issue date."""

    def __init__(self, db: Database, settings: Settings):
        """Initialize currency converter.

        Args:
            db: Database instance
            settings: Ledger settings providing the main currency
        """
        self.db = db
        self.main_currency = settings.main_currency

    def main_currency_amount(self, invoice: Invoice) -> Optional[Decimal]:
        """Invoice grand total in the main currency.

        Returns None when the invoice has no currency or when no rate exists
        for exactly its issue date. None means "cannot convert", never zero.
        """
        if invoice.currency is None:
            return None
        if invoice.currency == self.main_currency:
            return invoice.grand_total

        exchange_rate = self.db.get_exchange_rate(invoice.currency, invoice.issue_date)
        if exchange_rate is None:
            logger.debug(
                "No %s rate on %s for invoice %s", invoice.currency, invoice.issue_date, invoice.number
            )
            return None

        converted = invoice.grand_total * exchange_rate.unit_rate
        return round_money(converted, decimal_places(self.main_currency))

    def total_in_main_currency(self, invoices: Iterable[Invoice]) -> MainCurrencyTotal:
        """Sum invoices in the main currency.

        Invoices that cannot be converted are left out of the sum and flip
        ``missing_exchange_rates``.
        """
        total = Decimal("0")
        missing = False
        for invoice in invoices:
            amount = self.main_currency_amount(invoice)
            if amount is None:
                missing = True
                continue
            total += amount
        if missing:
            logger.warning("Main currency total excludes invoices without an exchange rate")
        return MainCurrencyTotal(
            amount=round_money(total, decimal_places(self.main_currency)),
            currency=self.main_currency,
            missing_exchange_rates=missing,
        )
