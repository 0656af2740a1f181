"""Feedback analysis: anonymize, summarize and classify one text."""

import logging
from typing import TYPE_CHECKING

from ..models.category import Category
from ..models.feedback import AnalysisResult
from ..models.model_state import ModelState
from .rule_based import analyze_with_rules
from .workflow import create_initial_state, get_compiled_workflow

if TYPE_CHECKING:
    from ..ai.lifecycle import ModelLifecycleManager

logger = logging.getLogger(__name__)


class FeedbackAnalyzer:
    """Runs the analysis workflow against a managed local model.

    ``analyze`` never fails: every stage has a rule-based fallback, and a run
    where the model cannot be made ready is answered entirely by rules.
    """

    def __init__(
        self,
        model_manager: "ModelLifecycleManager",
        generation_timeout: float | None = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            model_manager: Lifecycle manager for the local model
            generation_timeout: Per-stage timeout in seconds (defaults to the
                manager's)

        """
        self.model_manager = model_manager
        self.generation_timeout = generation_timeout
        self._workflow = get_compiled_workflow()

    async def initialize_model(self) -> ModelState:
        """Eagerly bring the model up; later analyses reuse the result."""
        return await self.model_manager.ensure_ready()

    async def analyze(self, text: str) -> AnalysisResult:
        """Analyze one piece of feedback.

        Args:
            text: Raw feedback text

        Returns:
            AnalysisResult with anonymized text, summary and category

        """
        try:
            final_state = await self._workflow.ainvoke(
                create_initial_state(text),
                config={
                    "configurable": {
                        "model_manager": self.model_manager,
                        "generation_timeout": self.generation_timeout,
                    }
                },
            )
        except Exception:
            logger.exception("Analysis workflow failed, using rule-based analysis")
            return analyze_with_rules(text)

        result = AnalysisResult(
            original_text=text,
            anonymized_text=final_state["anonymized_text"],
            summary=final_state["summary"],
            category=Category(final_state["category"]),
            stage_paths=dict(final_state.get("stage_paths") or {}),
        )

        if result.used_fallback:
            logger.info(
                f"Analysis used fallback for: {final_state.get('stage_errors')}"
            )
        return result
