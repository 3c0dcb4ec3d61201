"""Tests for WorkEntryService and its write pipeline."""

from datetime import date
from decimal import Decimal

import pytest

from billable.domain import errors
from billable.domain.entities import EntryType, WorkStatus
from billable.domain.work_entry import derive_entry_type, populate_hourly_rate


class TestPipeline:
    """Entry type derivation and rate capture."""

    @pytest.mark.parametrize(
        "hours,amount,expected",
        [
            (Decimal("2"), None, EntryType.TIME),
            (None, Decimal("100"), EntryType.FIXED),
            (Decimal("2"), Decimal("150"), EntryType.TIME),
        ],
    )
    def test_derive_entry_type(self, hours, amount, expected):
        assert derive_entry_type(hours, amount) == expected

    def test_fixed_entries_do_not_capture_rate(self, sample_project):
        assert populate_hourly_rate(EntryType.FIXED, None, sample_project) is None

    def test_explicit_rate_wins(self, sample_project):
        assert populate_hourly_rate(EntryType.TIME, Decimal("80"), sample_project) == Decimal("80")


class TestCreateEntry:
    def test_time_entry_captures_client_rate(self, work_entry_service, sample_project):
        """A project without its own rate falls back to the client's."""
        entry_id = work_entry_service.create_entry(sample_project.id, date(2024, 3, 4), hours=Decimal("3"))

        entry = work_entry_service.get_entry(entry_id)
        assert entry.entry_type == EntryType.TIME
        assert entry.status == WorkStatus.UNBILLED
        assert entry.hourly_rate == Decimal("100")
        assert entry.calculated_amount() == Decimal("300")

    def test_project_rate_overrides_client_rate(self, work_entry_service, project_service, sample_client):
        project_id = project_service.create_project(sample_client.id, "Audit", hourly_rate=Decimal("120"))
        entry_id = work_entry_service.create_entry(project_id, date(2024, 3, 4), hours=Decimal("1"))

        assert work_entry_service.get_entry(entry_id).hourly_rate == Decimal("120")

    def test_rate_is_captured_at_creation(self, temp_db, work_entry_service, client_service, sample_project):
        """Changing the client's rate later leaves logged work alone."""
        entry_id = work_entry_service.create_entry(sample_project.id, date(2024, 3, 4), hours=Decimal("1"))
        client_service.update_client(sample_project.client_id, hourly_rate=Decimal("200"))

        assert work_entry_service.get_entry(entry_id).hourly_rate == Decimal("100")

    def test_fixed_entry(self, work_entry_service, sample_project):
        entry_id = work_entry_service.create_entry(
            sample_project.id, date(2024, 3, 4), amount=Decimal("500"), description="Logo"
        )

        entry = work_entry_service.get_entry(entry_id)
        assert entry.entry_type == EntryType.FIXED
        assert entry.hourly_rate is None
        assert entry.calculated_amount() == Decimal("500")

    def test_amount_overrides_hours_times_rate(self, work_entry_service, sample_project):
        entry_id = work_entry_service.create_entry(
            sample_project.id, date(2024, 3, 4), hours=Decimal("5"), amount=Decimal("450")
        )

        entry = work_entry_service.get_entry(entry_id)
        assert entry.entry_type == EntryType.TIME
        assert entry.calculated_amount() == Decimal("450")

    def test_requires_hours_or_amount(self, work_entry_service, sample_project):
        with pytest.raises(errors.ValidationError, match="Either hours or amount must be provided"):
            work_entry_service.create_entry(sample_project.id, date(2024, 3, 4))

    @pytest.mark.parametrize("hours", [Decimal("0"), Decimal("-1")])
    def test_hours_must_be_positive(self, work_entry_service, sample_project, hours):
        with pytest.raises(errors.ValidationError) as exc_info:
            work_entry_service.create_entry(sample_project.id, date(2024, 3, 4), hours=hours)

        assert "hours" in exc_info.value.errors

    def test_unknown_project(self, work_entry_service):
        with pytest.raises(errors.NotFoundError):
            work_entry_service.create_entry(999, date(2024, 3, 4), hours=Decimal("1"))


class TestListAndUpdate:
    def test_list_filters(self, work_entry_service, march_entries, sample_client):
        entries = work_entry_service.list_entries(
            client_id=sample_client.id, start_date=date(2024, 3, 5), end_date=date(2024, 3, 31)
        )

        assert [entry.id for entry in entries] == march_entries[1:]
        assert len(work_entry_service.list_entries(status=WorkStatus.INVOICED)) == 0

    def test_update_hours(self, work_entry_service, march_entries):
        work_entry_service.update_entry(march_entries[0], hours=Decimal("6"))

        assert work_entry_service.get_entry(march_entries[0]).calculated_amount() == Decimal("600")

    def test_clearing_hours_turns_entry_fixed(self, work_entry_service, march_entries):
        work_entry_service.update_entry(march_entries[0], hours=None, amount=Decimal("250"))

        assert work_entry_service.get_entry(march_entries[0]).entry_type == EntryType.FIXED

    def test_rate_of_invoiced_entry_is_frozen(self, work_entry_service, draft_invoice, march_entries):
        with pytest.raises(errors.ValidationError, match="cannot be changed on invoiced entries"):
            work_entry_service.update_entry(march_entries[0], hourly_rate=Decimal("1"))

    def test_unknown_field(self, work_entry_service, march_entries):
        with pytest.raises(errors.ValidationError):
            work_entry_service.update_entry(march_entries[0], status="invoiced")


class TestDelete:
    def test_delete_unbilled(self, work_entry_service, march_entries):
        work_entry_service.delete_entry(march_entries[0])

        assert work_entry_service.get_entry(march_entries[0]) is None

    def test_invoiced_entry_cannot_be_deleted(self, work_entry_service, draft_invoice, march_entries):
        with pytest.raises(errors.DependencyError):
            work_entry_service.delete_entry(march_entries[0])
