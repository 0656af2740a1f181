"""Persistence contract for feedback records."""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable

from ..models.category import Category
from ..models.feedback import FeedbackRecord

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


def recency_key(record: FeedbackRecord) -> tuple:
    """Sort key for newest-first ordering; ties go to the higher id."""
    return (record.created_at, record.id or 0)


class FeedbackStore(ABC):
    """Stores analyzed feedback records.

    Every read returns records newest first. Mutations notify registered
    change listeners, possibly from a worker thread.
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []
        self._listener_lock = threading.Lock()

    @abstractmethod
    def insert(self, record: FeedbackRecord) -> int:
        """Store a record and return its generated id."""

    @abstractmethod
    def get(self, record_id: int) -> FeedbackRecord | None:
        """Get a record by id."""

    @abstractmethod
    def list_all(self) -> list[FeedbackRecord]:
        """All records, newest first."""

    @abstractmethod
    def list_by_device(self, device_id: str) -> list[FeedbackRecord]:
        """Records submitted from one device, newest first."""

    @abstractmethod
    def list_by_category(self, category: Category) -> list[FeedbackRecord]:
        """Records with one category, newest first."""

    @abstractmethod
    def count(self) -> int:
        """Total number of records."""

    @abstractmethod
    def count_by_category(self, category: Category) -> int:
        """Number of records with one category."""

    @abstractmethod
    def delete(self, record_id: int) -> bool:
        """Delete one record. Returns False if it did not exist."""

    @abstractmethod
    def clear(self) -> int:
        """Delete every record. Returns how many were deleted."""

    def close(self) -> None:
        """Release any resources held by the store."""

    def add_change_listener(self, listener: ChangeListener) -> None:
        with self._listener_lock:
            self._listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        with self._listener_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify_change(self) -> None:
        with self._listener_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Store change listener raised")
