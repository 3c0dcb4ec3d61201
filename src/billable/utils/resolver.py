"""Utilities for resolving clients and invoices given by ID, name or number."""

from billable.domain.client import ClientService
from billable.domain.invoice import InvoiceService


def _as_id(value: str | int) -> int | None:
    if isinstance(value, int):
        return value
    value = value.strip()
    return int(value) if value.isdigit() else None


def resolve_client(client_service: ClientService, client: str | int) -> int:
    """Resolve client name or ID to client ID.

    Args:
        client_service: ClientService instance
        client: Client name (str) or ID (int or string representation of int)

    Returns:
        Client ID

    Raises:
        ValueError: If client is not found
    """
    client_id = _as_id(client)
    if client_id is not None:
        if client_service.get_client(client_id) is None:
            raise ValueError(f"Client ID {client_id} not found")
        return client_id

    for candidate in client_service.list_clients():
        if candidate.name == client:
            return candidate.id

    raise ValueError(f"Client '{client}' not found")


def resolve_invoice(invoice_service: InvoiceService, invoice: str | int) -> int:
    """Resolve invoice number or ID to invoice ID.

    Numbers such as ``2024-001`` are tried first, then plain IDs.

    Raises:
        ValueError: If invoice is not found
    """
    if isinstance(invoice, str):
        by_number = invoice_service.get_invoice_by_number(invoice.strip())
        if by_number is not None:
            return by_number.id

    invoice_id = _as_id(invoice)
    if invoice_id is not None and invoice_service.get_invoice(invoice_id) is not None:
        return invoice_id

    raise ValueError(f"Invoice '{invoice}' not found")
