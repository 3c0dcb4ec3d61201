"""Invoice domain service.

Owns status transitions (draft -> final -> paid) and draft editing. Every
operation runs inside one :meth:`Database.transaction` so a reader never
sees line items and work entry flags out of step.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from billable.database.base import Database
from billable.domain import errors
from billable.domain.entities import (
    Invoice as InvoiceEntity,
    InvoiceLineItem as InvoiceLineItemEntity,
    InvoiceStatus,
    LineType,
    Settings,
    WorkEntry,
)
from billable.domain.payment_qr import PaymentQrCodeGenerator
from billable.domain.positions import PositionManager
from billable.domain.totals import ZERO
from billable.domain.validation import (
    add_error,
    check_minimum,
    check_present,
    check_vat_rate,
    raise_if_errors,
)

logger = logging.getLogger(__name__)

LINE_ITEM_EDITABLE = {"description", "quantity", "unit_price", "amount", "vat_rate"}


@dataclass(frozen=True)
class LineItemWithEntries:
    """A line item together with the work entries it bills."""

    line_item: InvoiceLineItemEntity
    work_entries: tuple[WorkEntry, ...]


def validate_line_item(
    description: Optional[str], amount: Optional[Decimal], vat_rate: Optional[Decimal]
) -> dict[str, list[str]]:
    """Collect field errors for a line item about to be saved."""
    field_errors: dict[str, list[str]] = {}
    check_present(field_errors, "description", description)
    if amount is None:
        add_error(field_errors, "amount", "can't be blank")
    check_minimum(field_errors, "amount", amount)
    check_vat_rate(field_errors, "vat_rate", vat_rate)
    return field_errors


class InvoiceService:
    """Service for invoice state transitions and draft editing."""

    def __init__(self, db: Database):
        """Initialize invoice service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_invoice(self, invoice_id: int) -> InvoiceEntity:
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None:
            raise errors.NotFoundError(errors.invoice_not_found(invoice_id))
        return invoice

    def _require_draft(self, invoice_id: int, message: str = errors.CANNOT_EDIT_FINALIZED) -> InvoiceEntity:
        invoice = self._require_invoice(invoice_id)
        if not invoice.is_draft:
            raise errors.StateTransitionError(message)
        return invoice

    def _require_line_item(self, invoice_id: int, line_item_id: int) -> InvoiceLineItemEntity:
        item = self.db.get_line_item(line_item_id)
        if item is None or item.invoice_id != invoice_id:
            raise errors.NotFoundError(errors.line_item_not_found(line_item_id, invoice_id))
        return item

    def _recalculate_totals(self, invoice_id: int) -> None:
        """Store totals derived from the current line items."""
        items = self.db.list_line_items(invoice_id)
        total_hours = sum(
            (
                item.quantity
                for item in items
                if item.line_type == LineType.TIME_AGGREGATE and item.quantity is not None
            ),
            ZERO,
        )
        total_amount = sum((item.amount for item in items), ZERO)
        self.db.update_invoice(invoice_id, total_hours=total_hours, total_amount=total_amount)

    def get_invoice(self, invoice_id: int) -> Optional[InvoiceEntity]:
        """Get invoice by ID."""
        return self.db.get_invoice(invoice_id)

    def get_invoice_by_number(self, number: str) -> Optional[InvoiceEntity]:
        """Get invoice by number."""
        return self.db.get_invoice_by_number(number)

    def list_invoices(
        self,
        status: Optional[InvoiceStatus] = None,
        client_id: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[InvoiceEntity]:
        """List invoices, newest first."""
        return self.db.list_invoices(
            status=status.value if status is not None else None,
            client_id=client_id,
            year=year,
        )

    # Status transitions
    def finalize(self, invoice_id: int) -> InvoiceEntity:
        """Lock a draft invoice for sending.

        Raises:
            NotFoundError: If invoice doesn't exist
            StateTransitionError: If the invoice is not a draft
        """
        with self.db.transaction():
            self._require_draft(invoice_id, errors.ALREADY_FINALIZED)
            self.db.update_invoice(invoice_id, status=InvoiceStatus.FINAL.value)
        invoice = self.db.get_invoice(invoice_id)
        logger.info("Finalized invoice %s", invoice.number)
        return invoice

    def mark_as_paid(self, invoice_id: int, paid_at: Optional[date] = None) -> InvoiceEntity:
        """Record payment of a final invoice.

        Args:
            invoice_id: Invoice ID
            paid_at: Payment date (default: today)

        Raises:
            NotFoundError: If invoice doesn't exist
            StateTransitionError: If the invoice is not final
        """
        with self.db.transaction():
            invoice = self._require_invoice(invoice_id)
            if invoice.status != InvoiceStatus.FINAL:
                raise errors.StateTransitionError(errors.ONLY_FINAL_CAN_BE_PAID)
            self.db.update_invoice(
                invoice_id,
                status=InvoiceStatus.PAID.value,
                paid_at=paid_at or date.today(),
            )
        invoice = self.db.get_invoice(invoice_id)
        logger.info("Invoice %s paid on %s", invoice.number, invoice.paid_at)
        return invoice

    # Draft editing
    def update_draft(
        self,
        invoice_id: int,
        issue_date: Optional[date] = None,
        due_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> InvoiceEntity:
        """Change dates or notes of a draft.

        Raises:
            NotFoundError: If invoice doesn't exist
            StateTransitionError: If the invoice is not a draft
            ValidationError: If the due date would precede the issue date
        """
        with self.db.transaction():
            invoice = self._require_draft(invoice_id)
            fields: dict[str, Any] = {}
            if issue_date is not None:
                fields["issue_date"] = issue_date
            if due_date is not None:
                fields["due_date"] = due_date
            if notes is not None:
                fields["notes"] = notes

            field_errors: dict[str, list[str]] = {}
            if fields.get("due_date", invoice.due_date) < fields.get("issue_date", invoice.issue_date):
                add_error(field_errors, "due_date", "must be on or after the issue date")
            raise_if_errors(field_errors)

            if fields:
                self.db.update_invoice(invoice_id, **fields)
        return self.db.get_invoice(invoice_id)

    def delete_draft(self, invoice_id: int) -> None:
        """Delete a draft and release its work entries back to unbilled.

        Raises:
            NotFoundError: If invoice doesn't exist
            StateTransitionError: If the invoice is not a draft
        """
        with self.db.transaction():
            invoice = self._require_draft(invoice_id, errors.CANNOT_DELETE_FINALIZED)
            entry_ids = [entry.id for entry in self.db.list_work_entries(invoice_id=invoice_id)]
            for item in invoice.line_items:
                entry_ids.extend(item.work_entry_ids)
            self.db.reset_work_entries(dict.fromkeys(entry_ids))
            self.db.delete_invoice(invoice_id)
        logger.info("Deleted draft invoice %s, released %d work entries", invoice.number, len(set(entry_ids)))

    # Line items
    def add_line_item(
        self,
        invoice_id: int,
        description: str,
        amount: Decimal,
        vat_rate: Decimal = ZERO,
        quantity: Optional[Decimal] = None,
        unit_price: Optional[Decimal] = None,
        line_type: LineType = LineType.FIXED,
    ) -> int:
        """Append a manual line item to a draft.

        Returns:
            Line item ID

        Raises:
            NotFoundError: If invoice doesn't exist
            StateTransitionError: If the invoice is not a draft
            ValidationError: If the line item is invalid
        """
        raise_if_errors(validate_line_item(description, amount, vat_rate))
        with self.db.transaction():
            self._require_draft(invoice_id)
            line_item_id = self.db.create_line_item(
                invoice_id=invoice_id,
                line_type=LineType(line_type).value,
                description=description.strip(),
                amount=amount,
                position=PositionManager(self.db, invoice_id).next_position(),
                vat_rate=vat_rate,
                quantity=quantity,
                unit_price=unit_price,
            )
            self._recalculate_totals(invoice_id)
        return line_item_id

    def update_line_item(self, invoice_id: int, line_item_id: int, **fields: Any) -> None:
        """Edit description, quantity, unit price, amount or VAT rate of a line item.

        Raises:
            NotFoundError: If invoice or line item doesn't exist
            StateTransitionError: If the invoice is not a draft
            ValidationError: If a field is unknown or the result is invalid
        """
        unknown = set(fields) - LINE_ITEM_EDITABLE
        if unknown:
            raise errors.ValidationError(f"Unknown line item field(s): {', '.join(sorted(unknown))}")
        with self.db.transaction():
            self._require_draft(invoice_id)
            item = self._require_line_item(invoice_id, line_item_id)
            raise_if_errors(
                validate_line_item(
                    fields.get("description", item.description),
                    fields.get("amount", item.amount),
                    fields.get("vat_rate", item.vat_rate),
                )
            )
            self.db.update_line_item(line_item_id, **fields)
            self._recalculate_totals(invoice_id)

    def remove_line_item(self, invoice_id: int, line_item_id: int) -> None:
        """Remove a line item and release the work entries it billed.

        Raises:
            NotFoundError: If invoice or line item doesn't exist
            StateTransitionError: If the invoice is not a draft
        """
        with self.db.transaction():
            self._require_draft(invoice_id)
            item = self._require_line_item(invoice_id, line_item_id)
            still_linked = {
                entry_id
                for other in self.db.list_line_items(invoice_id)
                if other.id != line_item_id
                for entry_id in other.work_entry_ids
            }
            released = [entry_id for entry_id in item.work_entry_ids if entry_id not in still_linked]
            self.db.delete_line_item(line_item_id)
            self.db.reset_work_entries(released)
            self._recalculate_totals(invoice_id)
        logger.debug("Removed line item %s from invoice %s", line_item_id, invoice_id)

    def reorder_line_item(self, invoice_id: int, line_item_id: int, direction: str) -> bool:
        """Move a line item "up" or "down".

        Returns:
            False when the item is already at the edge or the direction is unknown

        Raises:
            NotFoundError: If invoice or line item doesn't exist
            StateTransitionError: If the invoice is not a draft
        """
        with self.db.transaction():
            self._require_draft(invoice_id)
            item = self._require_line_item(invoice_id, line_item_id)
            return PositionManager(self.db, invoice_id).reorder(item, direction)

    def line_items_with_entries(self, invoice_id: int) -> list[LineItemWithEntries]:
        """Line items in position order, each with its work entries by date.

        Raises:
            NotFoundError: If invoice doesn't exist
        """
        self._require_invoice(invoice_id)
        result = []
        for item in self.db.list_line_items(invoice_id):
            entries = self.db.list_work_entries(entry_ids=item.work_entry_ids) if item.work_entry_ids else []
            result.append(LineItemWithEntries(line_item=item, work_entries=tuple(entries)))
        return result

    def payment_qr(
        self, invoice_id: int, settings: Settings, bank_account_id: Optional[int] = None
    ) -> PaymentQrCodeGenerator:
        """Build a QR code generator for an invoice.

        Banking details come from the given bank account, else the default
        account, else the settings.

        Raises:
            NotFoundError: If invoice or bank account doesn't exist
        """
        invoice = self._require_invoice(invoice_id)
        if bank_account_id is not None:
            bank_account = self.db.get_bank_account(bank_account_id)
            if bank_account is None:
                raise errors.NotFoundError(errors.bank_account_not_found(bank_account_id))
        else:
            bank_account = self.db.get_default_bank_account()
        return PaymentQrCodeGenerator(invoice, settings, bank_account)
