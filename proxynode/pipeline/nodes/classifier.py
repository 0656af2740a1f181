import logging

from langchain_core.runnables import RunnableConfig

from ...constants import PATH_AI, PATH_FALLBACK, STAGE_CLASSIFY
from ...exceptions import GenerationError
from ...models.category import Category
from ...utils.error_handling import error_kind, record_stage_outcome
from ..prompts import build_classify_prompt
from ..rule_based import classify
from ..state import AnalysisState
from .stage import attempt_ai

logger = logging.getLogger(__name__)


def parse_category(response: str) -> Category | None:
    """Find a category label in a model response.

    Labels are searched case-insensitively in priority order
    Academics, Infrastructure, Placement; the first one present wins.
    """
    lowered = response.lower()
    for category in Category.classifiable():
        if category.value.lower() in lowered:
            return category
    return None


async def classify_feedback(state: AnalysisState, config: RunnableConfig) -> dict:
    """Classify the anonymized text into a category."""
    text = state["anonymized_text"] or state["original_text"]

    response, error = await attempt_ai(config, build_classify_prompt(text))

    category = parse_category(response) if response is not None else None
    if category is None:
        if response is not None:
            error = GenerationError(f"Unrecognized category response: {response[:50]!r}")
        logger.warning(f"AI classification failed ({error_kind(error)}), using fallback")
        return {
            "category": classify(text).value,
            **record_stage_outcome(state, STAGE_CLASSIFY, PATH_FALLBACK, error),
        }

    logger.debug(f"AI classified feedback as {category.value}")
    return {
        "category": category.value,
        **record_stage_outcome(state, STAGE_CLASSIFY, PATH_AI),
    }
