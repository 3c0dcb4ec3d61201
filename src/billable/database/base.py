"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from billable.domain.entities import (
    BankAccount,
    Client,
    ExchangeRate,
    Invoice,
    InvoiceLineItem,
    MoneyTransaction,
    Project,
    Settings,
    WorkEntry,
)


class Database(ABC):
    """Abstract database interface for billable.

    Write methods commit on their own unless called inside
    :meth:`transaction`, in which case they only flush and the enclosing
    unit decides whether everything commits or rolls back.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Open an atomic unit of work. Nested units join the outer one."""
        pass

    # Settings operations
    @abstractmethod
    def get_settings(self) -> Optional[Settings]:
        """Get the settings row, or None before bootstrap."""
        pass

    @abstractmethod
    def create_settings(self, company_name: Optional[str], main_currency: str) -> int:
        """Create the settings row. Returns settings ID."""
        pass

    @abstractmethod
    def update_settings(self, **fields: Any) -> None:
        """Update settings fields."""
        pass

    # Bank account operations
    @abstractmethod
    def create_bank_account(
        self,
        name: str,
        iban: str,
        bic: Optional[str] = None,
        currency: Optional[str] = None,
        is_default: bool = False,
    ) -> int:
        """Create a bank account. Returns bank account ID."""
        pass

    @abstractmethod
    def get_bank_account(self, bank_account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def get_default_bank_account(self) -> Optional[BankAccount]:
        """Get the default bank account, if any."""
        pass

    @abstractmethod
    def list_bank_accounts(self) -> list[BankAccount]:
        """List all bank accounts."""
        pass

    @abstractmethod
    def update_bank_account(self, bank_account_id: int, **fields: Any) -> None:
        """Update bank account fields."""
        pass

    @abstractmethod
    def clear_default_bank_accounts(self, except_id: Optional[int] = None) -> None:
        """Unset the default flag on every account other than ``except_id``."""
        pass

    @abstractmethod
    def delete_bank_account(self, bank_account_id: int) -> None:
        """Delete a bank account."""
        pass

    # Client operations
    @abstractmethod
    def create_client(
        self,
        name: str,
        currency: Optional[str] = None,
        hourly_rate: Optional[Decimal] = None,
        payment_terms_days: Optional[int] = None,
        default_vat_rate: Decimal = Decimal("0"),
        email: Optional[str] = None,
        address: Optional[str] = None,
        vat_id: Optional[str] = None,
    ) -> int:
        """Create a client. Returns client ID."""
        pass

    @abstractmethod
    def get_client(self, client_id: int) -> Optional[Client]:
        """Get client by ID."""
        pass

    @abstractmethod
    def list_clients(self) -> list[Client]:
        """List all clients ordered by name."""
        pass

    @abstractmethod
    def update_client(self, client_id: int, **fields: Any) -> None:
        """Update client fields."""
        pass

    @abstractmethod
    def delete_client(self, client_id: int) -> None:
        """Delete a client."""
        pass

    @abstractmethod
    def get_client_project_count(self, client_id: int) -> int:
        """Count projects owned by a client."""
        pass

    @abstractmethod
    def get_client_invoice_count(self, client_id: int) -> int:
        """Count invoices issued to a client."""
        pass

    # Project operations
    @abstractmethod
    def create_project(
        self, client_id: int, name: str, hourly_rate: Optional[Decimal] = None, active: bool = True
    ) -> int:
        """Create a project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        pass

    @abstractmethod
    def list_projects(self, client_id: Optional[int] = None) -> list[Project]:
        """List projects, optionally filtered by client."""
        pass

    @abstractmethod
    def delete_project(self, project_id: int) -> None:
        """Delete a project together with its work entries."""
        pass

    # Work entry operations
    @abstractmethod
    def create_work_entry(
        self,
        project_id: int,
        date: date,
        entry_type: str,
        hours: Optional[Decimal] = None,
        amount: Optional[Decimal] = None,
        hourly_rate: Optional[Decimal] = None,
        description: Optional[str] = None,
    ) -> int:
        """Create a work entry. Returns work entry ID."""
        pass

    @abstractmethod
    def get_work_entry(self, entry_id: int) -> Optional[WorkEntry]:
        """Get work entry by ID."""
        pass

    @abstractmethod
    def list_work_entries(
        self,
        project_id: Optional[int] = None,
        client_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        invoice_id: Optional[int] = None,
        entry_ids: Optional[Iterable[int]] = None,
    ) -> list[WorkEntry]:
        """List work entries ordered by date ascending."""
        pass

    @abstractmethod
    def update_work_entry(self, entry_id: int, **fields: Any) -> None:
        """Update work entry fields."""
        pass

    @abstractmethod
    def delete_work_entry(self, entry_id: int) -> None:
        """Delete a work entry."""
        pass

    @abstractmethod
    def mark_work_entries_invoiced(self, entry_ids: Iterable[int], invoice_id: int) -> int:
        """Attach unbilled entries to an invoice and flag them invoiced.

        Returns:
            Number of entries updated; entries already invoiced are skipped
        """
        pass

    @abstractmethod
    def reset_work_entries(self, entry_ids: Iterable[int]) -> None:
        """Detach entries from their invoice and flag them unbilled."""
        pass

    # Invoice operations
    @abstractmethod
    def create_invoice(
        self,
        number: str,
        client_id: int,
        issue_date: date,
        due_date: date,
        status: str = "draft",
        currency: Optional[str] = None,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create an invoice. Returns invoice ID.

        Raises:
            ConflictError: If the invoice number is already taken
        """
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        """Get invoice by ID, with its line items."""
        pass

    @abstractmethod
    def get_invoice_by_number(self, number: str) -> Optional[Invoice]:
        """Get invoice by number, with its line items."""
        pass

    @abstractmethod
    def list_invoices(
        self,
        status: Optional[str] = None,
        client_id: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[Invoice]:
        """List invoices, newest issue date first."""
        pass

    @abstractmethod
    def list_invoice_numbers(self, prefix: str) -> list[str]:
        """List invoice numbers starting with ``prefix``."""
        pass

    @abstractmethod
    def update_invoice(self, invoice_id: int, **fields: Any) -> None:
        """Update invoice fields."""
        pass

    @abstractmethod
    def delete_invoice(self, invoice_id: int) -> None:
        """Delete an invoice together with its line items."""
        pass

    # Line item operations
    @abstractmethod
    def create_line_item(
        self,
        invoice_id: int,
        line_type: str,
        description: str,
        amount: Decimal,
        position: int,
        vat_rate: Decimal = Decimal("0"),
        quantity: Optional[Decimal] = None,
        unit_price: Optional[Decimal] = None,
        work_entry_ids: Iterable[int] = (),
    ) -> int:
        """Create a line item linked to the given work entries. Returns line item ID."""
        pass

    @abstractmethod
    def get_line_item(self, line_item_id: int) -> Optional[InvoiceLineItem]:
        """Get line item by ID."""
        pass

    @abstractmethod
    def list_line_items(self, invoice_id: int) -> list[InvoiceLineItem]:
        """List line items of an invoice in position order."""
        pass

    @abstractmethod
    def get_line_item_at_position(self, invoice_id: int, position: int) -> Optional[InvoiceLineItem]:
        """Get the line item holding ``position`` on an invoice."""
        pass

    @abstractmethod
    def get_max_line_item_position(self, invoice_id: int) -> Optional[int]:
        """Highest position used on an invoice, or None when it has no items."""
        pass

    @abstractmethod
    def update_line_item(self, line_item_id: int, **fields: Any) -> None:
        """Update line item fields, including ``position``."""
        pass

    @abstractmethod
    def delete_line_item(self, line_item_id: int) -> None:
        """Delete a line item and its work entry links."""
        pass

    # Exchange rate operations
    @abstractmethod
    def create_exchange_rate(self, currency: str, date: date, rate: Decimal, amount: int = 1) -> int:
        """Create an exchange rate. Returns exchange rate ID.

        Raises:
            ConflictError: If a rate already exists for the currency and date
        """
        pass

    @abstractmethod
    def get_exchange_rate(self, currency: str, date: date) -> Optional[ExchangeRate]:
        """Get the rate for a currency on exactly ``date``."""
        pass

    @abstractmethod
    def list_exchange_rates(self, currency: Optional[str] = None) -> list[ExchangeRate]:
        """List exchange rates, newest first."""
        pass

    # Money transaction operations
    @abstractmethod
    def create_money_transaction(
        self,
        source: str,
        transaction_type: str,
        amount: Decimal,
        currency: str,
        transacted_on: date,
        reference: Optional[str] = None,
        external_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> int:
        """Create a money transaction. Returns transaction ID.

        Raises:
            ConflictError: If external_id is already used for the source
        """
        pass

    @abstractmethod
    def get_money_transaction(self, transaction_id: int) -> Optional[MoneyTransaction]:
        """Get money transaction by ID."""
        pass

    @abstractmethod
    def list_money_transactions(
        self,
        transaction_type: Optional[str] = None,
        unmatched_only: bool = False,
    ) -> list[MoneyTransaction]:
        """List money transactions in insertion order."""
        pass

    @abstractmethod
    def set_transaction_invoice(self, transaction_id: int, invoice_id: int) -> None:
        """Link a transaction to the invoice it pays."""
        pass
