"""Sequential invoice numbers in ``{year}-{seq}`` format."""

import re
from datetime import date
from typing import Optional

from billable.database.base import Database

SEQUENCE_WIDTH = 3


class InvoiceNumberGenerator:
    """Produce the next invoice number for a year.

    Examples: 2024-001, 2024-002, ..., 2024-999, 2024-1000, 2025-001.
    """

    def __init__(self, db: Database):
        """Initialize invoice number generator.

        Args:
            db: Database instance
        """
        self.db = db

    def generate(self, year: Optional[int] = None) -> str:
        """Return the next free number for ``year`` (default: current year).

        Only numbers of the same year are considered; the sequence restarts
        at 001 every year. Sequences beyond 999 are not truncated.
        """
        if year is None:
            year = date.today().year
        return format_invoice_number(year, self.last_sequence(year) + 1)

    def last_sequence(self, year: int) -> int:
        """Highest sequence used in ``year``, or 0 if none."""
        pattern = re.compile(rf"^{year}-(\d+)$")
        sequences = []
        for number in self.db.list_invoice_numbers(f"{year}-"):
            match = pattern.match(number)
            if match:
                sequences.append(int(match.group(1)))
        return max(sequences, default=0)


def format_invoice_number(year: int, sequence: int) -> str:
    """Format a year and sequence, zero-padding the sequence to three digits."""
    return f"{year}-{sequence:0{SEQUENCE_WIDTH}d}"
