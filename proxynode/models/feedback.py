"""Feedback data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .category import Category


class InputModality(str, Enum):
    """How the feedback text was captured."""

    TYPED = "typed"
    SPOKEN = "spoken"

    @classmethod
    def from_voice_flag(cls, is_voice_input: bool) -> "InputModality":
        return cls.SPOKEN if is_voice_input else cls.TYPED


@dataclass(frozen=True)
class AnalysisResult:
    """Output of the analysis pipeline for one piece of feedback."""

    original_text: str
    anonymized_text: str
    summary: str
    category: Category

    # Which path ("ai" or "fallback") produced each stage
    stage_paths: dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def used_fallback(self) -> bool:
        """True if any stage fell back to the rule-based path."""
        return any(path == "fallback" for path in self.stage_paths.values())


@dataclass(frozen=True)
class FeedbackRecord:
    """A stored, immutable piece of analyzed feedback."""

    original_text: str
    anonymized_text: str
    summary: str
    category: Category
    device_id: str
    input_modality: InputModality = InputModality.TYPED
    created_at: datetime = field(default_factory=datetime.now)
    id: int | None = None

    @classmethod
    def from_analysis(
        cls,
        result: AnalysisResult,
        device_id: str,
        input_modality: InputModality,
        created_at: datetime | None = None,
    ) -> "FeedbackRecord":
        """Build an unsaved record from an analysis result."""
        return cls(
            original_text=result.original_text,
            anonymized_text=result.anonymized_text,
            summary=result.summary,
            category=result.category,
            device_id=device_id,
            input_modality=input_modality,
            created_at=created_at or datetime.now(),
        )

    @property
    def is_voice_input(self) -> bool:
        return self.input_modality is InputModality.SPOKEN

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary for serialization."""
        return {
            "id": self.id,
            "original_text": self.original_text,
            "anonymized_text": self.anonymized_text,
            "summary": self.summary,
            "category": self.category.value,
            "input_modality": self.input_modality.value,
            "created_at": self.created_at.isoformat(),
            "device_id": self.device_id,
        }


@dataclass
class FeedbackStats:
    """Aggregate counts derived from stored feedback."""

    total: int
    counts: dict[Category, int] = field(default_factory=dict)

    @property
    def academics(self) -> int:
        return self.counts.get(Category.ACADEMICS, 0)

    @property
    def infrastructure(self) -> int:
        return self.counts.get(Category.INFRASTRUCTURE, 0)

    @property
    def placement(self) -> int:
        return self.counts.get(Category.PLACEMENT, 0)

    @property
    def other(self) -> int:
        return self.counts.get(Category.OTHER, 0)

    def to_display_string(self) -> str:
        """Format statistics for display."""
        return (
            f"Total: {self.total} | Academics: {self.academics} | "
            f"Infrastructure: {self.infrastructure} | Placement: {self.placement} | "
            f"Other: {self.other}"
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            **{category.value: self.counts.get(category, 0) for category in Category},
        }
