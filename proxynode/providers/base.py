"""Contract for local inference backends."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ModelAvailability:
    """Answer to an availability query for one model."""

    exists: bool
    is_downloaded: bool = False


class InferenceProvider(ABC):
    """A swappable local inference backend.

    Any method may raise; the lifecycle manager converts failures into
    typed states and results.
    """

    @abstractmethod
    async def check_availability(self, model_id: str) -> ModelAvailability:
        """Report whether the model is known and already downloaded."""

    @abstractmethod
    def download(self, model_id: str) -> AsyncIterator[float]:
        """Download the model, yielding progress values in [0, 1].

        The sequence is finite and ends when the download completes.
        """

    @abstractmethod
    async def load(self, model_id: str) -> bool:
        """Load the model into memory. Returns False if loading failed."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate a completion for a single prompt."""

    async def aclose(self) -> None:
        """Release any resources held by the provider."""
