"""Concurrent submission of many feedback texts."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from ..constants import DEFAULT_BATCH_CONCURRENCY
from ..models.feedback import InputModality
from ..models.results import SubmitResult

if TYPE_CHECKING:
    from .feedback_repository import FeedbackRepository

logger = logging.getLogger(__name__)


class BatchSubmitter:
    """Submits texts concurrently with a cap on in-flight submissions."""

    def __init__(
        self,
        repository: "FeedbackRepository",
        max_concurrency: int | None = None,
    ) -> None:
        """Initialize the submitter.

        Args:
            repository: Repository that analyzes and stores each text
            max_concurrency: Maximum simultaneous submissions

        """
        self.repository = repository
        self.max_concurrency = max_concurrency or DEFAULT_BATCH_CONCURRENCY
        self._progress_callback: Callable[[int, int], None] | None = None

    def set_progress_callback(self, callback: Callable[[int, int], None]) -> None:
        """Set the progress callback function, called as (completed, total)."""
        self._progress_callback = callback

    async def submit_all(
        self,
        texts: Sequence[str],
        modality: InputModality = InputModality.TYPED,
    ) -> list[SubmitResult]:
        """Submit every text and return results in input order.

        A failed submission is reported in its result and does not stop the
        rest of the batch.
        """
        total = len(texts)
        completed = 0
        semaphore = asyncio.Semaphore(self.max_concurrency)
        start_time = time.time()

        async def submit_one(text: str) -> SubmitResult:
            nonlocal completed
            async with semaphore:
                result = await self.repository.submit(text, modality)
            completed += 1
            if self._progress_callback:
                self._progress_callback(completed, total)
            return result

        results = await asyncio.gather(*(submit_one(text) for text in texts))

        failures = sum(1 for r in results if not r.ok)
        logger.info(
            f"Submitted {total - failures}/{total} feedback texts "
            f"in {time.time() - start_time:.2f}s"
        )
        return list(results)
