"""Data models for the feedback pipeline."""

from .category import Category
from .feedback import AnalysisResult, FeedbackRecord, FeedbackStats, InputModality
from .model_state import ModelPhase, ModelState
from .results import GenerationResult, SubmitResult

__all__ = [
    "AnalysisResult",
    "Category",
    "FeedbackRecord",
    "FeedbackStats",
    "GenerationResult",
    "InputModality",
    "ModelPhase",
    "ModelState",
    "SubmitResult",
]
