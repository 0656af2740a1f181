from typing import TypedDict


class AnalysisState(TypedDict):
    """State that flows through the analysis workflow."""

    # Input
    original_text: str

    # Model availability, decided once per run
    model_ready: bool | None

    # Stage outputs
    anonymized_text: str | None
    summary: str | None
    category: str | None  # Category label

    # Bookkeeping: stage -> "ai" | "fallback", stage -> error kind
    stage_paths: dict[str, str] | None
    stage_errors: dict[str, str] | None
