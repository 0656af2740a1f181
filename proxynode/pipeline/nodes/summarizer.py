import logging

from langchain_core.runnables import RunnableConfig

from ...constants import (
    ELLIPSIS,
    PATH_AI,
    PATH_FALLBACK,
    STAGE_SUMMARIZE,
    SUMMARY_MAX_LENGTH,
    SUMMARY_TRUNCATE_LENGTH,
)
from ...utils.error_handling import error_kind, record_stage_outcome
from ..prompts import build_summarize_prompt
from ..rule_based import summarize
from ..state import AnalysisState
from .stage import attempt_ai

logger = logging.getLogger(__name__)


def _fit_summary(summary: str) -> str:
    # Small models ignore length instructions often enough to matter
    if len(summary) <= SUMMARY_MAX_LENGTH:
        return summary
    return summary[:SUMMARY_TRUNCATE_LENGTH].strip() + ELLIPSIS


async def summarize_feedback(state: AnalysisState, config: RunnableConfig) -> dict:
    """Summarize the anonymized text in one line."""
    text = state["anonymized_text"] or state["original_text"]

    response, error = await attempt_ai(config, build_summarize_prompt(text))

    if response is None:
        logger.warning(f"AI summarization failed ({error_kind(error)}), using fallback")
        return {
            "summary": summarize(text),
            **record_stage_outcome(state, STAGE_SUMMARIZE, PATH_FALLBACK, error),
        }

    return {
        "summary": _fit_summary(response),
        **record_stage_outcome(state, STAGE_SUMMARIZE, PATH_AI),
    }
