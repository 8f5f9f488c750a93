"""In-process cash card store.

An arena of records keyed by id plus an owner index. Ids come from a
monotonic counter and are never handed out twice, even after deletion.
Every operation runs under one lock and never awaits while holding it, so
each call is atomic with respect to concurrent requests in the process.
"""

import itertools
import logging
import threading
from decimal import Decimal

from app.domain.paging import PageRequest
from app.persistence.base import CashCardRecord, to_record

logger = logging.getLogger(__name__)


class InMemoryCashCardStore:
    """Store used by the ``memory`` backend and by the test suite."""

    def __init__(self, first_id: int = 1):
        self._records: dict[int, CashCardRecord] = {}
        self._by_owner: dict[str, set[int]] = {}
        self._ids = itertools.count(first_id)
        self._lock = threading.RLock()

    async def create(self, amount: Decimal, owner: str) -> CashCardRecord:
        """Allocate a fresh id and persist the card."""
        with self._lock:
            card_id = next(self._ids)
            record = to_record(card_id, amount, owner)
            self._records[card_id] = record
            self._by_owner.setdefault(owner, set()).add(card_id)
            return dict(record)

    async def get_by_id(self, card_id: int) -> CashCardRecord | None:
        with self._lock:
            record = self._records.get(card_id)
            return dict(record) if record is not None else None

    async def get_page(self, owner: str, page_request: PageRequest) -> list[CashCardRecord]:
        """Return the owner's cards for one page, sorted by the requested keys."""
        if page_request.is_past_end:
            return []

        with self._lock:
            owned = [dict(self._records[card_id]) for card_id in self._by_owner.get(owner, ())]

        # Stable sorts applied from the least significant key outwards
        for order in reversed(page_request.order_by):
            owned.sort(key=lambda record: record[order.field], reverse=order.descending)

        start = page_request.offset
        if page_request.size is None:
            return owned[start:]
        return owned[start : start + page_request.size]

    async def update(self, card_id: int, amount: Decimal) -> CashCardRecord | None:
        """Replace the amount; id and owner are kept."""
        with self._lock:
            current = self._records.get(card_id)
            if current is None:
                return None
            record = to_record(card_id, amount, current["owner"])
            self._records[card_id] = record
            return dict(record)

    async def delete(self, card_id: int) -> bool:
        with self._lock:
            record = self._records.pop(card_id, None)
            if record is None:
                return False
            owned = self._by_owner.get(record["owner"])
            if owned is not None:
                owned.discard(card_id)
                if not owned:
                    del self._by_owner[record["owner"]]
            return True

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


_memory_store: InMemoryCashCardStore | None = None
_memory_store_lock = threading.Lock()


def get_memory_store() -> InMemoryCashCardStore:
    """Get or create the process-wide in-memory store."""
    global _memory_store
    with _memory_store_lock:
        if _memory_store is None:
            _memory_store = InMemoryCashCardStore()
            logger.info("In-memory cash card store created")
        return _memory_store


def reset_memory_store() -> None:
    """Drop all cards and restart id issuance.

    Useful for tests to ensure a clean store.
    """
    global _memory_store
    with _memory_store_lock:
        _memory_store = None
