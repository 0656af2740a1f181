"""Analysis pipeline: anonymize -> summarize -> classify."""

from .analyzer import FeedbackAnalyzer
from .state import AnalysisState
from .workflow import get_compiled_workflow

__all__ = ["AnalysisState", "FeedbackAnalyzer", "get_compiled_workflow"]
