"""Rule-based analysis for runs where the model never became ready."""

from ...constants import PATH_FALLBACK, STAGES
from ..rule_based import analyze_with_rules
from ..state import AnalysisState


def analyze_without_model(state: AnalysisState) -> dict:
    """Run every stage on the rule-based path."""
    result = analyze_with_rules(state["original_text"])

    return {
        "anonymized_text": result.anonymized_text,
        "summary": result.summary,
        "category": result.category.value,
        "stage_paths": {stage: PATH_FALLBACK for stage in STAGES},
        "stage_errors": {stage: "NotReady" for stage in STAGES},
    }
