"""Dense, zero-based ordering of an invoice's line items."""

import logging
from typing import Any

from billable.database.base import Database
from billable.domain.entities import InvoiceLineItem

logger = logging.getLogger(__name__)

FIRST_POSITION = 0


class PositionManager:
    """Maintain line item positions on one invoice.

    Positions start at 0. Swaps park one item on a free slot first so the
    per-invoice uniqueness constraint never sees two items on one position.
    """

    def __init__(self, db: Database, invoice_id: int):
        """Initialize position manager.

        Args:
            db: Database instance
            invoice_id: Invoice whose line items are ordered
        """
        self.db = db
        self.invoice_id = invoice_id

    def next_position(self) -> int:
        """Position for a newly appended item."""
        current_max = self.db.get_max_line_item_position(self.invoice_id)
        if current_max is None:
            return FIRST_POSITION
        return current_max + 1

    def swap(self, first: InvoiceLineItem, second: InvoiceLineItem) -> None:
        """Exchange the positions of two items atomically."""
        first_position = first.position
        second_position = second.position
        with self.db.transaction():
            parking = self.next_position()
            self.db.update_line_item(first.id, position=parking)
            self.db.update_line_item(second.id, position=first_position)
            self.db.update_line_item(first.id, position=second_position)
        logger.debug(
            "Swapped line items %s and %s on invoice %s", first.id, second.id, self.invoice_id
        )

    def move_up(self, item: InvoiceLineItem) -> bool:
        """Swap with the item directly above. Returns False when there is none."""
        if item.position <= FIRST_POSITION:
            return False
        neighbour = self.db.get_line_item_at_position(self.invoice_id, item.position - 1)
        if neighbour is None:
            return False
        self.swap(item, neighbour)
        return True

    def move_down(self, item: InvoiceLineItem) -> bool:
        """Swap with the item directly below. Returns False when there is none."""
        neighbour = self.db.get_line_item_at_position(self.invoice_id, item.position + 1)
        if neighbour is None:
            return False
        self.swap(item, neighbour)
        return True

    def reorder(self, item: InvoiceLineItem, direction: Any) -> bool:
        """Move ``item`` "up" or "down". Unknown directions change nothing."""
        direction = str(getattr(direction, "value", direction))
        if direction == "up":
            return self.move_up(item)
        if direction == "down":
            return self.move_down(item)
        return False
