import logging

from langchain_core.runnables import RunnableConfig

from ..state import AnalysisState
from .stage import get_model_manager

logger = logging.getLogger(__name__)


async def check_model(state: AnalysisState, config: RunnableConfig) -> dict:
    """Make sure the model is ready before any stage tries it.

    Args:
        state: Analysis state
        config: Run configuration carrying the model manager

    Returns:
        Dict with ``model_ready``

    """
    model_state = await get_model_manager(config).ensure_ready()

    if not model_state.is_ready:
        logger.warning(
            f"Model unavailable ({model_state.describe()}), using rule-based analysis"
        )

    return {"model_ready": model_state.is_ready}
