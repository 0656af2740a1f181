import logging
from functools import lru_cache

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from .nodes.anonymizer import anonymize_feedback
from .nodes.classifier import classify_feedback
from .nodes.model_check import check_model
from .nodes.rule_fallback import analyze_without_model
from .nodes.summarizer import summarize_feedback
from .state import AnalysisState

logger = logging.getLogger(__name__)


def route_after_model_check(state: AnalysisState) -> str:
    """Send the run down the AI stages only if the model is ready."""
    if state.get("model_ready"):
        return "anonymize"
    return "rule_based"


@lru_cache(maxsize=1)
def get_compiled_workflow() -> CompiledStateGraph:
    """Get or create the compiled workflow.

    Returns:
        Compiled LangGraph workflow

    """
    workflow = StateGraph(AnalysisState)

    workflow.add_node("check_model", check_model)
    workflow.add_node("rule_based", analyze_without_model)
    workflow.add_node("anonymize", anonymize_feedback)
    workflow.add_node("summarize", summarize_feedback)
    workflow.add_node("classify", classify_feedback)

    workflow.set_entry_point("check_model")

    # No partial AI usage when the model is not ready
    workflow.add_conditional_edges(
        "check_model",
        route_after_model_check,
        {"anonymize": "anonymize", "rule_based": "rule_based"},
    )

    # Stages run strictly in order; each consumes the previous output
    workflow.add_edge("anonymize", "summarize")
    workflow.add_edge("summarize", "classify")
    workflow.add_edge("classify", END)
    workflow.add_edge("rule_based", END)

    logger.debug("Compiled analysis workflow")
    return workflow.compile()


def create_initial_state(text: str) -> AnalysisState:
    """Create initial state for analyzing one piece of feedback.

    Args:
        text: Raw feedback text

    Returns:
        Initial analysis state

    """
    return {
        "original_text": text,
        "model_ready": None,
        "anonymized_text": None,
        "summary": None,
        "category": None,
        "stage_paths": None,
        "stage_errors": None,
    }
