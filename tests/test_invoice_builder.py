"""Tests for building draft invoices from unbilled work."""

from datetime import date
from decimal import Decimal

import pytest

from billable.domain import errors
from billable.domain.entities import InvoiceStatus, LineType, WorkStatus
from billable.domain.invoice_builder import InvoiceBuilder, default_due_date


def _builder(db, client, **kwargs):
    kwargs.setdefault("issue_date", date(2024, 4, 1))
    return InvoiceBuilder(db, client_id=client.id, period_start="2024-03-01", period_end="2024-03-31", **kwargs)


class TestDefaultDueDate:
    """Due date derived from payment terms."""

    def test_adds_net_days(self):
        assert default_due_date(date(2024, 4, 1), 14) == date(2024, 4, 15)

    def test_no_terms_means_due_on_issue(self):
        assert default_due_date(date(2024, 4, 1), None) == date(2024, 4, 1)


class TestPreview:
    """Read-only projection of the draft."""

    def test_totals(self, temp_db, sample_client, march_entries):
        """12 hours at 100 plus a 500 fixed entry."""
        builder = _builder(temp_db, sample_client)

        assert builder.total_hours() == Decimal("12")
        assert builder.total_amount() == Decimal("1700")

    def test_line_items(self, temp_db, sample_client, march_entries):
        """One aggregate per project, then one line per fixed entry."""
        items = _builder(temp_db, sample_client).line_items()

        assert [item.line_type for item in items] == [LineType.TIME_AGGREGATE, LineType.FIXED]
        aggregate, fixed = items
        assert aggregate.description == "Website"
        assert aggregate.quantity == Decimal("12")
        assert aggregate.unit_price == Decimal("100")
        assert aggregate.amount == Decimal("1200")
        assert aggregate.work_entry_ids == tuple(march_entries[:2])
        assert fixed.description == "Logo design"
        assert fixed.quantity is None
        assert fixed.amount == Decimal("500")
        assert fixed.work_entry_ids == (march_entries[2],)
        assert all(item.vat_rate == Decimal("21") for item in items)

    def test_preview_writes_nothing(self, temp_db, sample_client, march_entries):
        """Previewing leaves entries unbilled and creates no invoice."""
        preview = _builder(temp_db, sample_client).preview()

        assert preview.due_date == date(2024, 4, 15)
        assert preview.currency == "EUR"
        assert preview.work_entry_ids == tuple(march_entries)
        assert temp_db.list_invoices() == []
        assert all(entry.status == WorkStatus.UNBILLED for entry in temp_db.list_work_entries())

    def test_period_bounds_are_inclusive(self, temp_db, sample_client, sample_project, work_entry_service):
        """Entries on the first and last day count, neighbours do not."""
        inside = [
            work_entry_service.create_entry(sample_project.id, date(2024, 3, 1), hours=Decimal("1")),
            work_entry_service.create_entry(sample_project.id, date(2024, 3, 31), hours=Decimal("1")),
        ]
        work_entry_service.create_entry(sample_project.id, date(2024, 2, 29), hours=Decimal("1"))
        work_entry_service.create_entry(sample_project.id, date(2024, 4, 1), hours=Decimal("1"))

        assert [entry.id for entry in _builder(temp_db, sample_client).unbilled_entries()] == inside

    def test_other_clients_are_excluded(
        self, temp_db, sample_client, march_entries, client_service, project_service, work_entry_service
    ):
        """Work of another client never lands on the invoice."""
        other_id = client_service.create_client(name="Initech", hourly_rate=Decimal("50"))
        other_project = project_service.create_project(client_id=other_id, name="Intranet")
        work_entry_service.create_entry(other_project, date(2024, 3, 10), hours=Decimal("3"))

        assert _builder(temp_db, sample_client).total_hours() == Decimal("12")

    def test_mixed_rates_leave_unit_price_empty(self, temp_db, sample_client, sample_project, work_entry_service):
        """Entries at different rates still aggregate, without a shared unit price."""
        work_entry_service.create_entry(sample_project.id, date(2024, 3, 4), hours=Decimal("2"))
        work_entry_service.create_entry(
            sample_project.id, date(2024, 3, 5), hours=Decimal("1"), hourly_rate=Decimal("150")
        )

        (item,) = _builder(temp_db, sample_client).line_items()
        assert item.unit_price is None
        assert item.amount == Decimal("350")

    def test_entry_without_rate_counts_zero(self, temp_db, client_service, project_service, work_entry_service):
        """A client without any rate yields zero-amount time lines."""
        client_id = client_service.create_client(name="Pro Bono")
        project_id = project_service.create_project(client_id=client_id, name="Charity")
        work_entry_service.create_entry(project_id, date(2024, 3, 4), hours=Decimal("5"))

        builder = InvoiceBuilder(temp_db, client_id, "2024-03-01", "2024-03-31", issue_date="2024-04-01")
        assert builder.total_hours() == Decimal("5")
        assert builder.total_amount() == Decimal("0")

    def test_unknown_client(self, temp_db):
        with pytest.raises(errors.NotFoundError):
            InvoiceBuilder(temp_db, client_id=999, period_start="2024-03-01", period_end="2024-03-31")


class TestCreateDraft:
    """Persisting the draft."""

    def test_creates_numbered_draft(self, draft_invoice):
        """The fixture draft carries the expected number, dates and totals."""
        assert draft_invoice.number == "2024-001"
        assert draft_invoice.status == InvoiceStatus.DRAFT
        assert draft_invoice.currency == "EUR"
        assert draft_invoice.issue_date == date(2024, 4, 1)
        assert draft_invoice.due_date == date(2024, 4, 15)
        assert draft_invoice.period_start == date(2024, 3, 1)
        assert draft_invoice.period_end == date(2024, 3, 31)
        assert draft_invoice.total_hours == Decimal("12")
        assert draft_invoice.total_amount == Decimal("1700")

    def test_line_items_and_totals(self, draft_invoice):
        """Positions start at zero and VAT is applied per line."""
        assert [item.position for item in draft_invoice.line_items] == [0, 1]
        assert [item.description for item in draft_invoice.line_items] == ["Website", "Logo design"]
        assert draft_invoice.subtotal == Decimal("1700.00")
        assert draft_invoice.total_vat == Decimal("357.00")
        assert draft_invoice.grand_total == Decimal("2057.00")

    def test_entries_become_invoiced(self, temp_db, draft_invoice, march_entries):
        for entry_id in march_entries:
            entry = temp_db.get_work_entry(entry_id)
            assert entry.status == WorkStatus.INVOICED
            assert entry.invoice_id == draft_invoice.id

    def test_invoiced_entries_are_not_billed_twice(self, temp_db, sample_client, draft_invoice):
        """A second build for the same period finds nothing."""
        result = _builder(temp_db, sample_client).create_draft()

        assert result.success is False
        assert result.errors == (errors.NO_UNBILLED_ENTRIES,)

    def test_no_unbilled_work(self, temp_db, sample_client):
        result = _builder(temp_db, sample_client).create_draft()

        assert result.success is False
        assert result.invoice is None
        assert temp_db.list_invoices() == []

    def test_due_date_before_issue_date(self, temp_db, sample_client, march_entries):
        """Inconsistent dates fail without writing anything."""
        result = _builder(temp_db, sample_client, due_date="2024-03-15").create_draft()

        assert result.success is False
        assert "Due date must be on or after issue date" in result.errors
        assert temp_db.list_invoices() == []

    def test_inverted_period(self, temp_db, sample_client, march_entries):
        builder = InvoiceBuilder(temp_db, sample_client.id, "2024-03-31", "2024-03-01", issue_date="2024-04-01")

        assert builder.create_draft().success is False

    def test_explicit_due_date_and_notes(self, temp_db, sample_client, march_entries):
        result = _builder(temp_db, sample_client, due_date=date(2024, 5, 1), notes="Thank you").create_draft()

        assert result.success
        assert result.invoice.due_date == date(2024, 5, 1)
        assert result.invoice.notes == "Thank you"

    def test_numbers_follow_issue_year(self, temp_db, sample_client, sample_project, work_entry_service):
        """Consecutive drafts in a year get consecutive numbers."""
        work_entry_service.create_entry(sample_project.id, date(2024, 3, 4), hours=Decimal("1"))
        first = _builder(temp_db, sample_client).create_draft()
        work_entry_service.create_entry(sample_project.id, date(2024, 3, 6), hours=Decimal("1"))
        second = _builder(temp_db, sample_client).create_draft()

        assert first.invoice.number == "2024-001"
        assert second.invoice.number == "2024-002"

    def test_number_conflict_rolls_back(self, temp_db, sample_client, march_entries, monkeypatch):
        """A number taken by another draft fails the build and keeps entries unbilled."""
        temp_db.create_invoice(
            number="2024-001", client_id=sample_client.id, issue_date=date(2024, 1, 1), due_date=date(2024, 1, 1)
        )
        monkeypatch.setattr(
            "billable.domain.invoice_builder.InvoiceNumberGenerator.generate", lambda self, year=None: "2024-001"
        )

        result = _builder(temp_db, sample_client).create_draft()

        assert result.success is False
        assert "2024-001" in result.errors[0]
        assert len(temp_db.list_invoices()) == 1
        assert all(entry.status == WorkStatus.UNBILLED for entry in temp_db.list_work_entries())

    def test_second_call_on_same_builder_fails(self, temp_db, sample_client, march_entries):
        """Work invoiced by the first draft is not picked up from the cached list."""
        builder = _builder(temp_db, sample_client)
        first = builder.create_draft()

        second = builder.create_draft()

        assert first.success is True
        assert second.success is False
        assert second.errors == (errors.NO_UNBILLED_ENTRIES,)
        assert [invoice.number for invoice in temp_db.list_invoices()] == ["2024-001"]
        assert {entry.invoice_id for entry in temp_db.list_work_entries()} == {first.invoice.id}

    def test_stale_preview_does_not_bill_twice(self, temp_db, sample_client, march_entries):
        """A builder previewed before another draft took the work finds nothing left."""
        first = _builder(temp_db, sample_client)
        second = _builder(temp_db, sample_client)
        assert len(second.preview().work_entry_ids) == 3

        assert first.create_draft().success is True
        result = second.create_draft()

        assert result.success is False
        assert result.errors == (errors.NO_UNBILLED_ENTRIES,)
        assert len(temp_db.list_invoices()) == 1

    def test_work_taken_during_build_rolls_back(self, temp_db, sample_client, march_entries, monkeypatch):
        """Entries flagged elsewhere between lookup and marking fail the build."""
        monkeypatch.setattr(temp_db, "mark_work_entries_invoiced", lambda entry_ids, invoice_id: 0)

        result = _builder(temp_db, sample_client).create_draft()

        assert result.success is False
        assert result.errors == (errors.WORK_ALREADY_INVOICED,)
        assert temp_db.list_invoices() == []
        assert all(entry.status == WorkStatus.UNBILLED for entry in temp_db.list_work_entries())
