"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    Carries per-field messages in ``errors``; the ``"base"`` key holds
    messages that are not tied to a single field.
    """

    def __init__(self, message: str, errors: Optional[dict[str, list[str]]] = None):
        super().__init__(message)
        self.errors = errors or {"base": [message]}

    @classmethod
    def from_errors(cls, errors: dict[str, list[str]]) -> "ValidationError":
        """Build a single error from collected per-field messages."""
        return cls("; ".join(full_messages(errors)), errors)

    @property
    def full_messages(self) -> list[str]:
        return full_messages(self.errors)


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class StateTransitionError(DomainError):
    """Operation is not allowed for the current status of an entity."""


def full_messages(errors: dict[str, list[str]]) -> list[str]:
    """Flatten per-field errors into readable sentences."""
    messages = []
    for field, field_errors in errors.items():
        for error in field_errors:
            if field == "base":
                messages.append(error)
            else:
                messages.append(f"{field.replace('_', ' ').capitalize()} {error}")
    return messages


def client_not_found(client_id: int) -> str:
    """Return message for missing client."""
    return f"Client {client_id} not found"


def project_not_found(project_id: int) -> str:
    """Return message for missing project."""
    return f"Project {project_id} not found"


def work_entry_not_found(entry_id: int) -> str:
    """Return message for missing work entry."""
    return f"Work entry {entry_id} not found"


def invoice_not_found(invoice_id: int) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def line_item_not_found(line_item_id: int, invoice_id: int) -> str:
    """Return message for a line item missing from an invoice."""
    return f"Line item {line_item_id} not found on invoice {invoice_id}"


def bank_account_not_found(bank_account_id: int) -> str:
    """Return message for missing bank account."""
    return f"Bank account {bank_account_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing money transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_invoice_number(number: str) -> str:
    """Return message for an invoice number that is already taken."""
    return f"Invoice number '{number}' already exists"


def duplicate_exchange_rate(currency: str, rate_date) -> str:
    """Return message for a second rate on the same currency and day."""
    return f"Exchange rate for {currency} on {rate_date.isoformat()} already exists"


def duplicate_transaction_external_id(external_id: str, source: str) -> str:
    """Return message for a transaction imported twice from the same source."""
    return f"Transaction with external_id '{external_id}' already exists for source '{source}'"


def client_delete_blocked() -> str:
    """Return message when a client still owns projects or invoices."""
    return "Cannot delete client with associated projects or invoices."


def project_delete_blocked() -> str:
    """Return message when a project has invoiced work."""
    return "Cannot delete project with invoiced work entries."


def bank_account_delete_blocked() -> str:
    """Return message when the last default bank account would be removed."""
    return "Cannot delete the only default bank account."


CANNOT_EDIT_FINALIZED = "Cannot edit a finalized invoice"
CANNOT_DELETE_FINALIZED = "Cannot delete a finalized invoice"
ALREADY_FINALIZED = "Invoice is already finalized"
ONLY_FINAL_CAN_BE_PAID = "Only final invoices can be marked as paid"
NO_UNBILLED_ENTRIES = "No unbilled work entries found for the specified period"
WORK_ALREADY_INVOICED = "Some work entries were invoiced by another draft"
SETTINGS_NOT_INITIALIZED = "Settings have not been initialized; run 'billable settings init'"
