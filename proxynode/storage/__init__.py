"""Feedback persistence."""

from .base import FeedbackStore
from .memory_store import InMemoryFeedbackStore
from .sql_store import SQLFeedbackStore


def create_store(database_url: str | None = None) -> FeedbackStore:
    """Create the SQL store for a URL, or the in-memory store without one."""
    if database_url:
        return SQLFeedbackStore(database_url)
    return InMemoryFeedbackStore()


__all__ = ["FeedbackStore", "InMemoryFeedbackStore", "SQLFeedbackStore", "create_store"]
