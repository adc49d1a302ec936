# Overview: Service-layer operations for receipts; numbering, the in-memory ledger and hand-off to storage.

"""
Receipt Ledger

WHY: Every completed sale gets a unique, strictly increasing receipt
number and a place in the revenue ledger, whether or not the receipt
files could be written.

DESIGN:
- Numbers come from one SequenceGenerator owned by this store (starts at 1)
- Ledger append happens under the ledger lock; file I/O happens after the
  lock is released
- A storage failure is logged and remembered, never rolled back
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal

from ..models import Receipt
from .concurrency import SequenceGenerator
from .persistence_service import ReceiptPersistence, ReceiptPersistenceError

logger = logging.getLogger(__name__)


class ReceiptStore:
    def __init__(self, persistence: ReceiptPersistence):
        self.persistence = persistence
        self._ledger: list[Receipt] = []
        self._by_number: dict[int, Receipt] = {}
        self._ledger_lock = threading.Lock()
        self._numbers = SequenceGenerator()
        self._failures: list[tuple[int, ReceiptPersistenceError]] = []

    # =========================================================================
    # NUMBERING
    # =========================================================================

    def next_receipt_number(self) -> int:
        return self._numbers.next()

    def reset_numbering(self) -> None:
        """Start numbering at 1 again. Test isolation only; recorded receipts stay."""
        self._numbers.reset()

    # =========================================================================
    # LEDGER
    # =========================================================================

    def record(self, receipt: Receipt) -> bool:
        """
        Add ``receipt`` to the ledger, then persist it.

        Returns True when both receipt files were written, False when
        storage failed (the receipt is still counted).
        """
        with self._ledger_lock:
            self._ledger.append(receipt)
            self._by_number[receipt.number] = receipt

        try:
            self.persistence.save(receipt)
        except ReceiptPersistenceError as exc:
            logger.error("Receipt #%s recorded but not persisted: %s", receipt.number, exc.message)
            with self._ledger_lock:
                self._failures.append((receipt.number, exc))
            return False
        return True

    def get(self, receipt_number: int) -> Receipt | None:
        with self._ledger_lock:
            return self._by_number.get(receipt_number)

    def receipts(self) -> list[Receipt]:
        with self._ledger_lock:
            return sorted(self._ledger, key=lambda r: r.number)

    def receipt_count(self) -> int:
        with self._ledger_lock:
            return len(self._ledger)

    def total_revenue(self) -> Decimal:
        with self._ledger_lock:
            return sum((r.total for r in self._ledger), Decimal("0"))

    def persistence_failures(self) -> list[tuple[int, ReceiptPersistenceError]]:
        with self._ledger_lock:
            return list(self._failures)

    # =========================================================================
    # STORAGE READS
    # =========================================================================

    def reload(self, receipt_number: int) -> Receipt:
        return self.persistence.load_receipt(receipt_number)

    def read_text(self, receipt_number: int) -> str:
        return self.persistence.read_text(receipt_number)
