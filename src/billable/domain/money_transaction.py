"""Money transaction domain service.

Bank-sync sources feed transactions in through :meth:`record_transaction`;
matching against invoices lives in :mod:`billable.domain.matching`.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from billable.database.base import Database
from billable.domain.entities import MoneyTransaction as MoneyTransactionEntity, TransactionType
from billable.domain.validation import (
    add_error,
    check_currency,
    check_minimum,
    check_present,
    raise_if_errors,
)

logger = logging.getLogger(__name__)


class MoneyTransactionService:
    """Service for recording and listing bank transactions."""

    def __init__(self, db: Database):
        """Initialize money transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def record_transaction(
        self,
        source: str,
        transaction_type: TransactionType,
        amount: Decimal,
        currency: str,
        transacted_on: date,
        reference: Optional[str] = None,
        external_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> int:
        """Store a transaction coming from a bank source.

        Args:
            source: Name of the feeding source (e.g. "manual", "fio")
            transaction_type: Income or expense
            amount: Positive transaction amount
            currency: ISO currency code
            transacted_on: Value date
            reference: Payment reference (variable symbol) used for matching
            external_id: Source-specific ID, unique per source
            description: Optional free text

        Returns:
            Transaction ID

        Raises:
            ValidationError: If a field is invalid
            ConflictError: If external_id was already imported from the source
        """
        field_errors: dict[str, list[str]] = {}
        check_present(field_errors, "source", source)
        check_present(field_errors, "currency", currency)
        check_currency(field_errors, "currency", currency)
        if amount is None:
            add_error(field_errors, "amount", "can't be blank")
        check_minimum(field_errors, "amount", amount, inclusive=False)
        if transacted_on is None:
            add_error(field_errors, "transacted_on", "can't be blank")
        try:
            transaction_type = TransactionType(transaction_type)
        except ValueError:
            add_error(field_errors, "transaction_type", "must be income or expense")
        raise_if_errors(field_errors)

        txn_id = self.db.create_money_transaction(
            source=source,
            transaction_type=transaction_type.value,
            amount=amount,
            currency=currency,
            transacted_on=transacted_on,
            reference=(reference or "").strip() or None,
            external_id=external_id,
            description=description,
        )
        logger.debug("Recorded %s transaction %s from %s", transaction_type.value, txn_id, source)
        return txn_id

    def get_transaction(self, transaction_id: int) -> Optional[MoneyTransactionEntity]:
        """Get transaction by ID."""
        return self.db.get_money_transaction(transaction_id)

    def list_transactions(
        self,
        transaction_type: Optional[TransactionType] = None,
        unmatched_only: bool = False,
    ) -> list[MoneyTransactionEntity]:
        """List transactions in insertion order."""
        return self.db.list_money_transactions(
            transaction_type=transaction_type.value if transaction_type is not None else None,
            unmatched_only=unmatched_only,
        )

    def list_unmatched_income(self) -> list[MoneyTransactionEntity]:
        """Income transactions not yet linked to an invoice."""
        return self.list_transactions(transaction_type=TransactionType.INCOME, unmatched_only=True)
