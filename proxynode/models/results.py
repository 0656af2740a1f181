"""Typed results returned across component boundaries."""

from dataclasses import dataclass

from ..exceptions import GenerationFailure, ProxyNodeError


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a single generation call."""

    text: str | None = None
    error: GenerationFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None

    @property
    def usable_text(self) -> str | None:
        """Trimmed response text, or None if failed or blank."""
        if not self.ok:
            return None
        stripped = self.text.strip()
        return stripped or None


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of a feedback submission."""

    record_id: int | None = None
    error: ProxyNodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.record_id is not None
