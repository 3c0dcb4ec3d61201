"""Draft invoice construction from unbilled work.

Time entries are aggregated into one line per project; every fixed entry
becomes a line of its own. Creating the draft flips the contributing work
entries to invoiced in the same unit of work.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Union

from billable.database.base import Database
from billable.domain import errors
from billable.domain.entities import (
    BuildResult,
    Client,
    EntryType,
    InvoicePreview,
    InvoiceStatus,
    LineType,
    PreviewLineItem,
    Project,
    WorkEntry,
    WorkStatus,
)
from billable.domain.numbering import InvoiceNumberGenerator
from billable.domain.positions import PositionManager
from billable.domain.totals import ZERO
from billable.utils.date_parser import coerce_date

logger = logging.getLogger(__name__)

DateLike = Union[date, str]


def default_due_date(issue_date: date, payment_terms_days: Optional[int]) -> date:
    """Issue date plus the client's net days; no terms means due on issue."""
    if payment_terms_days is None:
        return issue_date
    return issue_date + timedelta(days=payment_terms_days)


class InvoiceBuilder:
    """Build a draft invoice for one client and billing period.

    Args:
        db: Database instance
        client_id: Client to invoice
        period_start: First day of the billing period (date or ISO string)
        period_end: Last day of the billing period (date or ISO string)
        issue_date: Defaults to today
        due_date: Defaults to issue date plus the client's payment terms
        notes: Free text printed on the invoice

    Raises:
        NotFoundError: If the client doesn't exist
    """

    def __init__(
        self,
        db: Database,
        client_id: int,
        period_start: DateLike,
        period_end: DateLike,
        issue_date: Optional[DateLike] = None,
        due_date: Optional[DateLike] = None,
        notes: Optional[str] = None,
    ):
        self.db = db
        client = db.get_client(client_id)
        if client is None:
            raise errors.NotFoundError(errors.client_not_found(client_id))
        self.client: Client = client
        self.period_start = coerce_date(period_start)
        self.period_end = coerce_date(period_end)
        self.issue_date = coerce_date(issue_date) if issue_date is not None else date.today()
        if due_date is not None:
            self.due_date = coerce_date(due_date)
        else:
            self.due_date = default_due_date(self.issue_date, client.payment_terms_days)
        self.notes = notes
        self._projects: dict[int, Project] = {}
        self._unbilled: Optional[list[WorkEntry]] = None

    def _project(self, project_id: int) -> Project:
        if project_id not in self._projects:
            self._projects[project_id] = self.db.get_project(project_id)
        return self._projects[project_id]

    def _entry_amount(self, entry: WorkEntry) -> Decimal:
        amount = entry.calculated_amount(self._project(entry.project_id).effective_hourly_rate)
        if amount is None:
            logger.debug("Work entry %s has no rate; counted as zero", entry.id)
            return ZERO
        return amount

    def unbilled_entries(self, refresh: bool = False) -> list[WorkEntry]:
        """Unbilled entries of the client's projects within the period, oldest first.

        The list is cached; ``refresh`` reads it from the database again.
        """
        if self._unbilled is None or refresh:
            self._unbilled = self.db.list_work_entries(
                client_id=self.client.id,
                status=WorkStatus.UNBILLED.value,
                start_date=self.period_start,
                end_date=self.period_end,
            )
        return self._unbilled

    def total_hours(self) -> Decimal:
        """Hours of time entries; fixed entries count zero."""
        return sum(
            (
                entry.hours
                for entry in self.unbilled_entries()
                if entry.entry_type == EntryType.TIME and entry.hours is not None
            ),
            ZERO,
        )

    def total_amount(self) -> Decimal:
        """Calculated amount of every unbilled entry, time and fixed."""
        return sum((self._entry_amount(entry) for entry in self.unbilled_entries()), ZERO)

    def line_items(self) -> list[PreviewLineItem]:
        """Line items the draft would get, time aggregates first then fixed entries."""
        time_groups: dict[int, list[WorkEntry]] = {}
        fixed_entries: list[WorkEntry] = []
        for entry in self.unbilled_entries():
            if entry.entry_type == EntryType.TIME:
                time_groups.setdefault(entry.project_id, []).append(entry)
            else:
                fixed_entries.append(entry)

        items = []
        for project_id, entries in time_groups.items():
            project = self._project(project_id)
            rates = {entry.hourly_rate for entry in entries}
            items.append(
                PreviewLineItem(
                    line_type=LineType.TIME_AGGREGATE,
                    description=project.name,
                    quantity=sum((entry.hours or ZERO for entry in entries), ZERO),
                    amount=sum((self._entry_amount(entry) for entry in entries), ZERO),
                    vat_rate=self.client.default_vat_rate,
                    work_entry_ids=tuple(entry.id for entry in entries),
                    project_id=project_id,
                    unit_price=rates.pop() if len(rates) == 1 else None,
                )
            )
        for entry in fixed_entries:
            items.append(
                PreviewLineItem(
                    line_type=LineType.FIXED,
                    description=entry.description or self._project(entry.project_id).name,
                    quantity=None,
                    amount=self._entry_amount(entry),
                    vat_rate=self.client.default_vat_rate,
                    work_entry_ids=(entry.id,),
                    project_id=entry.project_id,
                )
            )
        return items

    def preview(self) -> InvoicePreview:
        """Projection of the draft without writing anything."""
        return InvoicePreview(
            client=self.client,
            period_start=self.period_start,
            period_end=self.period_end,
            issue_date=self.issue_date,
            due_date=self.due_date,
            total_hours=self.total_hours(),
            total_amount=self.total_amount(),
            currency=self.client.currency,
            line_items=tuple(self.line_items()),
            work_entry_ids=tuple(entry.id for entry in self.unbilled_entries()),
        )

    def _validate(self) -> list[str]:
        messages = []
        if self.period_end < self.period_start:
            messages.append("Period end must be on or after period start")
        if self.due_date < self.issue_date:
            messages.append("Due date must be on or after issue date")
        return messages

    def create_draft(self) -> BuildResult:
        """Create the draft invoice and mark its work entries invoiced.

        Unbilled work is looked up again inside the unit of work, so entries
        invoiced since an earlier preview are never billed twice. Returns a
        failed result, without writing anything, when there is no unbilled
        work, the dates are inconsistent, or another draft took the number
        or the work first.
        """
        messages = self._validate()
        try:
            with self.db.transaction():
                entries = self.unbilled_entries(refresh=True)
                if not entries:
                    return BuildResult(success=False, errors=(errors.NO_UNBILLED_ENTRIES,))
                if messages:
                    return BuildResult(success=False, errors=tuple(messages))

                number = InvoiceNumberGenerator(self.db).generate(self.issue_date.year)
                invoice_id = self.db.create_invoice(
                    number=number,
                    client_id=self.client.id,
                    issue_date=self.issue_date,
                    due_date=self.due_date,
                    status=InvoiceStatus.DRAFT.value,
                    currency=self.client.currency,
                    period_start=self.period_start,
                    period_end=self.period_end,
                    notes=self.notes,
                )
                positions = PositionManager(self.db, invoice_id)
                for item in self.line_items():
                    self.db.create_line_item(
                        invoice_id=invoice_id,
                        line_type=item.line_type.value,
                        description=item.description,
                        amount=item.amount,
                        position=positions.next_position(),
                        vat_rate=item.vat_rate,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        work_entry_ids=item.work_entry_ids,
                    )
                marked = self.db.mark_work_entries_invoiced([entry.id for entry in entries], invoice_id)
                if marked != len(entries):
                    raise errors.ConflictError(errors.WORK_ALREADY_INVOICED)
                self.db.update_invoice(
                    invoice_id,
                    total_hours=self.total_hours(),
                    total_amount=self.total_amount(),
                )
        except errors.ConflictError as e:
            logger.warning("Draft for client %s not created: %s", self.client.id, e)
            return BuildResult(success=False, errors=(str(e),))

        invoice = self.db.get_invoice(invoice_id)
        logger.info(
            "Created draft invoice %s for client %s with %d line item(s)",
            invoice.number,
            self.client.id,
            len(invoice.line_items),
        )
        return BuildResult(success=True, invoice=invoice)
