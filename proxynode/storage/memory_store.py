"""
In-memory feedback storage.
"""

import threading
from dataclasses import replace
from itertools import count

from ..models.category import Category
from ..models.feedback import FeedbackRecord
from .base import FeedbackStore, recency_key


class InMemoryFeedbackStore(FeedbackStore):
    """In-memory feedback storage, safe to use from several threads"""

    def __init__(self):
        super().__init__()
        # record id -> FeedbackRecord
        self._records: dict[int, FeedbackRecord] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def insert(self, record: FeedbackRecord) -> int:
        """Store a record under a newly generated id"""
        with self._lock:
            record_id = next(self._ids)
            self._records[record_id] = replace(record, id=record_id)
        self._notify_change()
        return record_id

    def get(self, record_id: int) -> FeedbackRecord | None:
        with self._lock:
            return self._records.get(record_id)

    def _sorted(self, records) -> list[FeedbackRecord]:
        return sorted(records, key=recency_key, reverse=True)

    def list_all(self) -> list[FeedbackRecord]:
        with self._lock:
            return self._sorted(self._records.values())

    def list_by_device(self, device_id: str) -> list[FeedbackRecord]:
        with self._lock:
            return self._sorted(
                r for r in self._records.values() if r.device_id == device_id
            )

    def list_by_category(self, category: Category) -> list[FeedbackRecord]:
        with self._lock:
            return self._sorted(
                r for r in self._records.values() if r.category == category
            )

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def count_by_category(self, category: Category) -> int:
        with self._lock:
            return sum(1 for r in self._records.values() if r.category == category)

    def delete(self, record_id: int) -> bool:
        with self._lock:
            removed = self._records.pop(record_id, None)
        if removed is None:
            return False
        self._notify_change()
        return True

    def clear(self) -> int:
        """Delete all records (ids keep increasing afterwards)"""
        with self._lock:
            removed = len(self._records)
            self._records.clear()
        self._notify_change()
        return removed
