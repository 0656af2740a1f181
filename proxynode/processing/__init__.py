"""Feedback submission and retrieval."""

from .batch_submitter import BatchSubmitter
from .feedback_repository import FeedbackRepository

__all__ = ["BatchSubmitter", "FeedbackRepository"]
