"""Utility functions for billable."""

from billable.utils.date_parser import parse_date, coerce_date
from billable.utils.amount_parser import parse_amount
from billable.utils.payment_terms import parse_payment_terms

__all__ = ["parse_date", "coerce_date", "parse_amount", "parse_payment_terms"]
