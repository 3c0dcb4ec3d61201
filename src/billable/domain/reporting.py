"""Revenue and unbilled work reporting."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from billable.database.base import Database
from billable.domain.currency import CurrencyConverter
from billable.domain.entities import (
    EntryType,
    InvoiceStatus,
    MainCurrencyTotal,
    Settings,
    UnbilledClientSummary,
    WorkStatus,
)
from billable.domain.totals import ZERO

logger = logging.getLogger(__name__)


class ReportingService:
    """Aggregate figures across invoices and work entries."""

    def __init__(self, db: Database, settings: Settings):
        """Initialize reporting service.

        Args:
            db: Database instance
            settings: Ledger settings providing the main currency
        """
        self.db = db
        self.settings = settings
        self.converter = CurrencyConverter(db, settings)

    def total_in_main_currency(self, year: Optional[int] = None) -> MainCurrencyTotal:
        """Paid revenue of ``year`` (default: current year) in the main currency.

        Invoices without an exchange rate on their issue date are left out
        and reported through ``missing_exchange_rates``.
        """
        if year is None:
            year = date.today().year
        invoices = self.db.list_invoices(status=InvoiceStatus.PAID.value, year=year)
        return self.converter.total_in_main_currency(invoices)

    def main_currency_amount(self, invoice_id: int) -> Optional[Decimal]:
        """Grand total of one invoice in the main currency, None if not convertible."""
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None:
            return None
        return self.converter.main_currency_amount(invoice)

    def unbilled_summary(self) -> list[UnbilledClientSummary]:
        """Unbilled hours and amount per client, in each client's own currency.

        Clients without unbilled work are omitted.
        """
        projects = {project.id: project for project in self.db.list_projects()}
        summaries = []
        for client in self.db.list_clients():
            entries = self.db.list_work_entries(client_id=client.id, status=WorkStatus.UNBILLED.value)
            if not entries:
                continue
            hours = ZERO
            amount = ZERO
            for entry in entries:
                if entry.entry_type == EntryType.TIME and entry.hours is not None:
                    hours += entry.hours
                amount += entry.calculated_amount(projects[entry.project_id].effective_hourly_rate) or ZERO
            summaries.append(
                UnbilledClientSummary(
                    client_id=client.id,
                    client_name=client.name,
                    currency=client.currency,
                    project_count=len({entry.project_id for entry in entries}),
                    total_hours=hours,
                    total_amount=amount,
                )
            )
        return summaries
