"""Settings domain service.

Settings are created once by an explicit bootstrap step and then passed as
a :class:`~billable.domain.entities.Settings` value into the components
that need company, currency or banking defaults. Reading never creates.
"""

import logging
import re
from typing import Any, Optional

from billable.database.base import Database
from billable.domain import errors
from billable.domain.entities import Settings
from billable.domain.validation import add_error, check_currency, raise_if_errors

logger = logging.getLogger(__name__)

DEFAULT_MAIN_CURRENCY = "EUR"
SETTINGS_FIELDS = {"company_name", "main_currency", "iban", "bic", "email", "address", "vat_id"}


def strip_whitespace(value: Optional[str]) -> Optional[str]:
    """Remove every whitespace character; blank becomes None."""
    if value is None:
        return None
    stripped = re.sub(r"\s+", "", value)
    return stripped or None


class SettingsService:
    """Service for the single ledger settings record."""

    def __init__(self, db: Database):
        """Initialize settings service.

        Args:
            db: Database instance
        """
        self.db = db

    def bootstrap(
        self, company_name: Optional[str] = None, main_currency: str = DEFAULT_MAIN_CURRENCY
    ) -> Settings:
        """Create the settings record if it does not exist yet.

        Safe to call on every start; existing settings are returned untouched.
        """
        existing = self.db.get_settings()
        if existing is not None:
            return existing

        field_errors: dict[str, list[str]] = {}
        check_currency(field_errors, "main_currency", main_currency)
        raise_if_errors(field_errors)

        self.db.create_settings(company_name=company_name, main_currency=main_currency)
        logger.info("Initialized settings with main currency %s", main_currency)
        return self.get_settings()

    def get_settings(self) -> Settings:
        """Return the settings.

        Raises:
            NotFoundError: If settings have not been bootstrapped
        """
        settings = self.db.get_settings()
        if settings is None:
            raise errors.NotFoundError(errors.SETTINGS_NOT_INITIALIZED)
        return settings

    def update_settings(self, **fields: Any) -> Settings:
        """Update settings fields.

        IBAN and BIC are stored without whitespace.

        Raises:
            NotFoundError: If settings have not been bootstrapped
            ValidationError: If a field is unknown or invalid
        """
        self.get_settings()
        field_errors: dict[str, list[str]] = {}
        for unknown in sorted(set(fields) - SETTINGS_FIELDS):
            add_error(field_errors, unknown, "is not a setting")
        if "main_currency" in fields:
            if not fields["main_currency"]:
                add_error(field_errors, "main_currency", "can't be blank")
            else:
                check_currency(field_errors, "main_currency", fields["main_currency"])
        raise_if_errors(field_errors)

        for key in ("iban", "bic"):
            if key in fields:
                fields[key] = strip_whitespace(fields[key])
        self.db.update_settings(**fields)
        return self.get_settings()
