import logging

from langchain_core.runnables import RunnableConfig

from ...constants import PATH_AI, PATH_FALLBACK, STAGE_ANONYMIZE
from ...utils.error_handling import error_kind, record_stage_outcome
from ..prompts import build_anonymize_prompt
from ..rule_based import anonymize
from ..state import AnalysisState
from .stage import attempt_ai

logger = logging.getLogger(__name__)


async def anonymize_feedback(state: AnalysisState, config: RunnableConfig) -> dict:
    """Strip personal identifiers from the original text."""
    text = state["original_text"]

    response, error = await attempt_ai(config, build_anonymize_prompt(text))

    if response is None:
        logger.warning(f"AI anonymization failed ({error_kind(error)}), using fallback")
        return {
            "anonymized_text": anonymize(text),
            **record_stage_outcome(state, STAGE_ANONYMIZE, PATH_FALLBACK, error),
        }

    return {
        "anonymized_text": response,
        **record_stage_outcome(state, STAGE_ANONYMIZE, PATH_AI),
    }
