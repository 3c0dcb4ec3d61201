"""Client domain service."""

import logging
from decimal import Decimal
from typing import Any, Optional

from billable.database.base import Database
from billable.domain import errors
from billable.domain.entities import Client as ClientEntity
from billable.domain.validation import (
    add_error,
    check_currency,
    check_minimum,
    check_present,
    check_vat_rate,
    normalize_currency,
    raise_if_errors,
)

logger = logging.getLogger(__name__)


class ClientService:
    """Service for managing clients."""

    def __init__(self, db: Database):
        """Initialize client service.

        Args:
            db: Database instance
        """
        self.db = db

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
        """Create a client.

        Args:
            name: Client name
            currency: Optional ISO currency code invoices are issued in
            hourly_rate: Optional default hourly rate for the client's projects
            payment_terms_days: Optional number of days until invoices are due
            default_vat_rate: VAT percentage applied to new line items
            email: Optional contact email
            address: Optional postal address
            vat_id: Optional VAT registration number

        Returns:
            Client ID

        Raises:
            ValidationError: If any field is invalid
        """
        currency = normalize_currency(currency)
        self._validate(
            name=name,
            currency=currency,
            hourly_rate=hourly_rate,
            payment_terms_days=payment_terms_days,
            default_vat_rate=default_vat_rate,
        )
        client_id = self.db.create_client(
            name=name.strip(),
            currency=currency,
            hourly_rate=hourly_rate,
            payment_terms_days=payment_terms_days,
            default_vat_rate=default_vat_rate,
            email=email,
            address=address,
            vat_id=vat_id,
        )
        logger.info("Created client %s (%s)", client_id, name)
        return client_id

    def get_client(self, client_id: int) -> Optional[ClientEntity]:
        """Get client by ID.

        Args:
            client_id: Client ID

        Returns:
            Client entity or None if not found
        """
        return self.db.get_client(client_id)

    def list_clients(self) -> list[ClientEntity]:
        """List all clients."""
        return self.db.list_clients()

    def update_client(self, client_id: int, **fields: Any) -> None:
        """Update client fields.

        Raises:
            NotFoundError: If client doesn't exist
            ValidationError: If any field is invalid
        """
        client = self.db.get_client(client_id)
        if client is None:
            raise errors.NotFoundError(errors.client_not_found(client_id))

        if "currency" in fields:
            fields["currency"] = normalize_currency(fields["currency"])
        merged = {
            "name": client.name,
            "currency": client.currency,
            "hourly_rate": client.hourly_rate,
            "payment_terms_days": client.payment_terms_days,
            "default_vat_rate": client.default_vat_rate,
        }
        merged.update({key: value for key, value in fields.items() if key in merged})
        self._validate(**merged)
        self.db.update_client(client_id, **fields)

    def delete_client(self, client_id: int) -> None:
        """Delete a client.

        Raises:
            NotFoundError: If client doesn't exist
            DependencyError: If the client still has projects or invoices
        """
        client = self.db.get_client(client_id)
        if client is None:
            raise errors.NotFoundError(errors.client_not_found(client_id))

        if self.db.get_client_project_count(client_id) > 0 or self.db.get_client_invoice_count(client_id) > 0:
            raise errors.DependencyError(errors.client_delete_blocked())

        self.db.delete_client(client_id)
        logger.info("Deleted client %s", client_id)

    def _validate(
        self,
        name: Optional[str],
        currency: Optional[str],
        hourly_rate: Optional[Decimal],
        payment_terms_days: Optional[int],
        default_vat_rate: Optional[Decimal],
    ) -> None:
        field_errors: dict[str, list[str]] = {}
        check_present(field_errors, "name", name)
        check_currency(field_errors, "currency", currency)
        check_minimum(field_errors, "hourly_rate", hourly_rate, inclusive=False)
        check_vat_rate(field_errors, "default_vat_rate", default_vat_rate)
        if payment_terms_days is not None and payment_terms_days < 0:
            add_error(field_errors, "payment_terms_days", "must be greater than or equal to 0")
        raise_if_errors(field_errors)
