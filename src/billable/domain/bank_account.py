"""Bank account domain service.

At most one account is the default at any time, and once any account
exists exactly one is. Changing the default unsets the previous one in the
same unit of work.
"""

import logging
from typing import Any, Optional

from billable.database.base import Database
from billable.domain import errors
from billable.domain.entities import BankAccount as BankAccountEntity
from billable.domain.settings import strip_whitespace
from billable.domain.validation import add_error, check_currency, check_iban, check_present, raise_if_errors

logger = logging.getLogger(__name__)

CANNOT_UNSET_DEFAULT = "Cannot unset the default bank account; mark another account as default instead"


class BankAccountService:
    """Service for managing bank accounts."""

    def __init__(self, db: Database):
        """Initialize bank account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        iban: str,
        bic: Optional[str] = None,
        currency: Optional[str] = None,
        is_default: bool = False,
    ) -> int:
        """Create a bank account.

        The first account always becomes the default.

        Returns:
            Bank account ID

        Raises:
            ValidationError: If name or IBAN is missing, the IBAN fails its checksum or currency is malformed
        """
        iban = strip_whitespace(iban)
        field_errors: dict[str, list[str]] = {}
        check_present(field_errors, "name", name)
        check_present(field_errors, "iban", iban)
        check_iban(field_errors, "iban", iban)
        check_currency(field_errors, "currency", currency)
        raise_if_errors(field_errors)

        with self.db.transaction():
            if not self.db.list_bank_accounts():
                is_default = True
            account_id = self.db.create_bank_account(
                name=name.strip(),
                iban=iban,
                bic=strip_whitespace(bic),
                currency=currency or None,
                is_default=is_default,
            )
            if is_default:
                self.db.clear_default_bank_accounts(except_id=account_id)

        logger.info("Created bank account %s (default=%s)", account_id, is_default)
        return account_id

    def get_account(self, bank_account_id: int) -> Optional[BankAccountEntity]:
        """Get bank account by ID."""
        return self.db.get_bank_account(bank_account_id)

    def get_default(self) -> Optional[BankAccountEntity]:
        """Get the default bank account, if any exist."""
        return self.db.get_default_bank_account()

    def list_accounts(self) -> list[BankAccountEntity]:
        """List all bank accounts."""
        return self.db.list_bank_accounts()

    def update_account(self, bank_account_id: int, **fields: Any) -> None:
        """Update a bank account.

        Setting ``is_default=True`` unsets the previous default. Setting it to
        False on the current default is rejected, since that would leave no
        default account.

        Raises:
            NotFoundError: If account doesn't exist
            ValidationError: If a field is invalid or the default would be lost
        """
        account = self.db.get_bank_account(bank_account_id)
        if account is None:
            raise errors.NotFoundError(errors.bank_account_not_found(bank_account_id))

        field_errors: dict[str, list[str]] = {}
        if "iban" in fields:
            fields["iban"] = strip_whitespace(fields["iban"])
            check_present(field_errors, "iban", fields["iban"])
            check_iban(field_errors, "iban", fields["iban"])
        if "bic" in fields:
            fields["bic"] = strip_whitespace(fields["bic"])
        if "name" in fields:
            check_present(field_errors, "name", fields["name"])
        if "currency" in fields:
            check_currency(field_errors, "currency", fields["currency"])
        if fields.get("is_default") is False and account.is_default:
            add_error(field_errors, "is_default", CANNOT_UNSET_DEFAULT)
        raise_if_errors(field_errors)

        with self.db.transaction():
            self.db.update_bank_account(bank_account_id, **fields)
            if fields.get("is_default"):
                self.db.clear_default_bank_accounts(except_id=bank_account_id)

    def set_default(self, bank_account_id: int) -> None:
        """Make an account the default, unsetting the previous one."""
        self.update_account(bank_account_id, is_default=True)
        logger.info("Bank account %s is now the default", bank_account_id)

    def delete_account(self, bank_account_id: int) -> None:
        """Delete a bank account.

        Deleting the default hands the default over to the oldest remaining
        account.

        Raises:
            NotFoundError: If account doesn't exist
            DependencyError: If it is the only account and the default
        """
        account = self.db.get_bank_account(bank_account_id)
        if account is None:
            raise errors.NotFoundError(errors.bank_account_not_found(bank_account_id))

        remaining = [acc for acc in self.db.list_bank_accounts() if acc.id != bank_account_id]
        if account.is_default and not remaining:
            raise errors.DependencyError(errors.bank_account_delete_blocked())

        with self.db.transaction():
            self.db.delete_bank_account(bank_account_id)
            if account.is_default:
                successor = min(remaining, key=lambda acc: acc.id)
                self.db.update_bank_account(successor.id, is_default=True)
                logger.info("Bank account %s inherited the default", successor.id)
