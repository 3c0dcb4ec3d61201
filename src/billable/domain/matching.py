"""Reconciliation of incoming payments against final invoices.

A transaction matches an invoice when all of these hold:

- it is income and not linked to an invoice yet
- its reference equals the invoice number exactly
- its amount equals the invoice grand total exactly

Drafts and already paid invoices are never candidates.
"""

import logging
from typing import Optional

from billable.database.base import Database
from billable.domain.entities import (
    Invoice,
    InvoiceStatus,
    MatchResult,
    MatchSummary,
    MoneyTransaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

NOT_INCOME = "Not an income transaction"
ALREADY_MATCHED = "Transaction already matched"
NO_REFERENCE = "No reference"
NO_MATCHING_INVOICE = "No matching invoice found"


class InvoiceMatchingService:
    """Match money transactions to the invoices they pay."""

    def __init__(self, db: Database):
        """Initialize invoice matching service.

        Args:
            db: Database instance
        """
        self.db = db

    def find_candidate(self, transaction: MoneyTransaction) -> Optional[Invoice]:
        """Final invoice numbered like the reference with the exact amount, if any."""
        invoice = self.db.get_invoice_by_number(transaction.reference)
        if invoice is None or invoice.status != InvoiceStatus.FINAL:
            return None
        if invoice.grand_total != transaction.amount:
            return None
        return invoice

    def match(self, transaction: MoneyTransaction) -> MatchResult:
        """Try to settle an invoice with one transaction.

        On success the invoice becomes paid on the transaction's value date
        and the transaction is linked to it, both in one unit of work.
        Failures leave everything untouched.
        """
        if transaction.transaction_type != TransactionType.INCOME:
            return MatchResult(success=False, transaction_id=transaction.id, error=NOT_INCOME)
        if transaction.invoice_id is not None:
            return MatchResult(success=False, transaction_id=transaction.id, error=ALREADY_MATCHED)
        if not transaction.reference:
            return MatchResult(success=False, transaction_id=transaction.id, error=NO_REFERENCE)

        with self.db.transaction():
            invoice = self.find_candidate(transaction)
            if invoice is None:
                logger.debug("No invoice for transaction %s (reference %r)", transaction.id, transaction.reference)
                return MatchResult(success=False, transaction_id=transaction.id, error=NO_MATCHING_INVOICE)
            self.db.update_invoice(
                invoice.id,
                status=InvoiceStatus.PAID.value,
                paid_at=transaction.transacted_on,
            )
            self.db.set_transaction_invoice(transaction.id, invoice.id)

        logger.info("Transaction %s paid invoice %s", transaction.id, invoice.number)
        return MatchResult(success=True, transaction_id=transaction.id, invoice=self.db.get_invoice(invoice.id))

    def match_all(self) -> MatchSummary:
        """Match every unmatched income transaction in insertion order.

        Each transaction runs in its own unit of work, so one failure never
        undoes another match.
        """
        transactions = self.db.list_money_transactions(
            transaction_type=TransactionType.INCOME.value, unmatched_only=True
        )
        results = tuple(self.match(transaction) for transaction in transactions)
        summary = MatchSummary(results=results)
        logger.info("Matched %d of %d transaction(s)", summary.matched, len(results))
        return summary
