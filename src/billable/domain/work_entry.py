"""Work entry domain service.

Writes go through a fixed pre-persistence pipeline:

1. :func:`derive_entry_type` - time if hours are given, fixed if only an
   amount is given
2. :func:`populate_hourly_rate` - time entries capture the project's
   effective rate unless one was supplied
3. :func:`validate_work_entry` - field checks, run last so they see the
   derived type and rate
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from billable.database.base import Database
from billable.domain import errors
from billable.domain.entities import EntryType, Project, WorkEntry as WorkEntryEntity, WorkStatus
from billable.domain.validation import add_error, check_minimum, raise_if_errors

logger = logging.getLogger(__name__)

_UNSET = object()


def derive_entry_type(hours: Optional[Decimal], amount: Optional[Decimal]) -> EntryType:
    """Pick the entry type from the supplied fields.

    Entries with both hours and an amount stay time entries whose amount
    overrides hours x rate. With neither set, time is returned and
    validation rejects the entry.
    """
    if amount is not None and hours is None:
        return EntryType.FIXED
    return EntryType.TIME


def populate_hourly_rate(
    entry_type: EntryType, hourly_rate: Optional[Decimal], project: Project
) -> Optional[Decimal]:
    """Rate to store on the entry."""
    if entry_type != EntryType.TIME or hourly_rate is not None:
        return hourly_rate
    return project.effective_hourly_rate


def validate_work_entry(
    entry_date: Optional[date],
    hours: Optional[Decimal],
    amount: Optional[Decimal],
    existing: Optional[WorkEntryEntity] = None,
    hourly_rate: Any = _UNSET,
) -> dict[str, list[str]]:
    """Collect field errors for a work entry about to be saved."""
    field_errors: dict[str, list[str]] = {}
    if entry_date is None:
        add_error(field_errors, "date", "can't be blank")
    check_minimum(field_errors, "hours", hours, inclusive=False)
    check_minimum(field_errors, "amount", amount)
    if hours is None and amount is None:
        add_error(field_errors, "base", "Either hours or amount must be provided")
    if (
        existing is not None
        and existing.status == WorkStatus.INVOICED
        and hourly_rate is not _UNSET
        and hourly_rate != existing.hourly_rate
    ):
        add_error(field_errors, "hourly_rate", "cannot be changed on invoiced entries")
    return field_errors


class WorkEntryService:
    """Service for logging billable work."""

    def __init__(self, db: Database):
        """Initialize work entry service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_entry(
        self,
        project_id: int,
        entry_date: date,
        hours: Optional[Decimal] = None,
        amount: Optional[Decimal] = None,
        hourly_rate: Optional[Decimal] = None,
        description: Optional[str] = None,
    ) -> int:
        """Log work on a project.

        Args:
            project_id: Project ID
            entry_date: Day the work was done
            hours: Hours worked (time entries)
            amount: Fixed price, or a custom amount overriding hours x rate
            hourly_rate: Optional rate; defaults to the project's effective rate
            description: Optional description

        Returns:
            Work entry ID

        Raises:
            NotFoundError: If project doesn't exist
            ValidationError: If the entry is invalid
        """
        project = self.db.get_project(project_id)
        if project is None:
            raise errors.NotFoundError(errors.project_not_found(project_id))

        entry_type = derive_entry_type(hours, amount)
        hourly_rate = populate_hourly_rate(entry_type, hourly_rate, project)
        raise_if_errors(validate_work_entry(entry_date, hours, amount))

        entry_id = self.db.create_work_entry(
            project_id=project_id,
            date=entry_date,
            entry_type=entry_type.value,
            hours=hours,
            amount=amount,
            hourly_rate=hourly_rate,
            description=description,
        )
        logger.info("Logged %s entry %s on project %s", entry_type.value, entry_id, project_id)
        return entry_id

    def get_entry(self, entry_id: int) -> Optional[WorkEntryEntity]:
        """Get work entry by ID."""
        return self.db.get_work_entry(entry_id)

    def list_entries(
        self,
        project_id: Optional[int] = None,
        client_id: Optional[int] = None,
        status: Optional[WorkStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[WorkEntryEntity]:
        """List work entries with filters, oldest first."""
        return self.db.list_work_entries(
            project_id=project_id,
            client_id=client_id,
            status=status.value if status is not None else None,
            start_date=start_date,
            end_date=end_date,
        )

    def update_entry(self, entry_id: int, **fields: Any) -> None:
        """Update a work entry, re-running the write pipeline.

        Accepted fields: date, hours, amount, hourly_rate, description.

        Raises:
            NotFoundError: If entry doesn't exist
            ValidationError: If the result is invalid or the rate of an
                invoiced entry would change
        """
        entry = self.db.get_work_entry(entry_id)
        if entry is None:
            raise errors.NotFoundError(errors.work_entry_not_found(entry_id))
        unknown = set(fields) - {"date", "hours", "amount", "hourly_rate", "description"}
        if unknown:
            raise errors.ValidationError(f"Unknown work entry field(s): {', '.join(sorted(unknown))}")

        project = self.db.get_project(entry.project_id)
        hours = fields.get("hours", entry.hours)
        amount = fields.get("amount", entry.amount)
        requested_rate = fields.get("hourly_rate", entry.hourly_rate)

        entry_type = derive_entry_type(hours, amount)
        if entry.status == WorkStatus.INVOICED:
            hourly_rate = requested_rate
        else:
            hourly_rate = populate_hourly_rate(entry_type, requested_rate, project)
        raise_if_errors(
            validate_work_entry(
                fields.get("date", entry.date),
                hours,
                amount,
                existing=entry,
                hourly_rate=fields["hourly_rate"] if "hourly_rate" in fields else _UNSET,
            )
        )

        updates = dict(fields)
        updates["entry_type"] = entry_type.value
        updates["hourly_rate"] = hourly_rate
        self.db.update_work_entry(entry_id, **updates)

    def delete_entry(self, entry_id: int) -> None:
        """Delete an unbilled work entry.

        Raises:
            NotFoundError: If entry doesn't exist
            DependencyError: If the entry has been invoiced
        """
        entry = self.db.get_work_entry(entry_id)
        if entry is None:
            raise errors.NotFoundError(errors.work_entry_not_found(entry_id))
        if entry.status == WorkStatus.INVOICED:
            raise errors.DependencyError(f"Cannot delete invoiced work entry {entry_id}")
        self.db.delete_work_entry(entry_id)
