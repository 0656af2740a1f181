"""Lifecycle state of the local inference model."""

from dataclasses import dataclass
from enum import Enum

from ..exceptions import ModelLifecycleError


class ModelPhase(str, Enum):
    """Phases of the model lifecycle state machine."""

    UNINITIALIZED = "uninitialized"
    CHECKING_AVAILABILITY = "checking_availability"
    DOWNLOADING = "downloading"
    LOADING_INTO_MEMORY = "loading_into_memory"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ModelState:
    """Snapshot of the model lifecycle.

    ``progress`` is only meaningful while downloading; ``error`` only when
    failed.
    """

    phase: ModelPhase
    progress: float | None = None
    error: ModelLifecycleError | None = None

    @classmethod
    def uninitialized(cls) -> "ModelState":
        return cls(ModelPhase.UNINITIALIZED)

    @classmethod
    def checking(cls) -> "ModelState":
        return cls(ModelPhase.CHECKING_AVAILABILITY)

    @classmethod
    def downloading(cls, progress: float) -> "ModelState":
        return cls(ModelPhase.DOWNLOADING, progress=progress)

    @classmethod
    def loading(cls) -> "ModelState":
        return cls(ModelPhase.LOADING_INTO_MEMORY)

    @classmethod
    def ready(cls) -> "ModelState":
        return cls(ModelPhase.READY)

    @classmethod
    def failed(cls, error: ModelLifecycleError) -> "ModelState":
        return cls(ModelPhase.FAILED, error=error)

    @property
    def is_ready(self) -> bool:
        return self.phase is ModelPhase.READY

    @property
    def is_failed(self) -> bool:
        return self.phase is ModelPhase.FAILED

    @property
    def reason(self) -> str | None:
        """Failure reason, if failed."""
        return str(self.error) if self.error else None

    def describe(self) -> str:
        """Short human-readable description."""
        if self.phase is ModelPhase.DOWNLOADING and self.progress is not None:
            return f"downloading ({self.progress:.0%})"
        if self.phase is ModelPhase.FAILED:
            return f"failed: {self.reason}"
        return self.phase.value.replace("_", " ")
