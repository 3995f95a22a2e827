"""Compensation log — undo list for stock movements made during one operation.

Every successful forward movement (reserve during checkout, release during
cancellation) is recorded. If a later step fails, ``unwind`` walks the list
in reverse issuing the inverse movement, so inventory returns to where it
was before the operation began.
"""

import structlog

logger = structlog.get_logger(__name__)


class CompensationLog:
    def __init__(self, ledger, undo="release"):
        self.ledger = ledger
        self._undo = undo
        self._entries = []

    def record(self, product_id, quantity):
        self._entries.append((str(product_id), quantity))

    def __len__(self):
        return len(self._entries)

    def unwind(self):
        """Issue the inverse movement for every recorded entry, most recent first.

        Returns the entries that could not be undone. Failures are logged and
        do not stop the remaining entries from being undone.
        """
        failed = []
        undo = getattr(self.ledger, self._undo)
        while self._entries:
            product_id, quantity = self._entries.pop()
            try:
                undo(product_id, quantity)
            except Exception as exc:
                logger.error(
                    "Compensating stock movement failed",
                    product_id=product_id,
                    quantity=quantity,
                    action=self._undo,
                    error=str(exc),
                )
                failed.append((product_id, quantity))
        return failed
