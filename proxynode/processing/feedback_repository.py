"""Binds feedback analysis to persistence."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from concurrent.futures import ThreadPoolExecutor
from contextlib import aclosing
from datetime import datetime
from functools import partial
from typing import Any

from ..ai.lifecycle import ModelLifecycleManager
from ..config import DATABASE_URL, WORKER_POOL_SIZE
from ..constants import SAMPLE_FEEDBACK
from ..exceptions import ValidationError
from ..models.category import Category
from ..models.feedback import FeedbackRecord, FeedbackStats, InputModality
from ..models.results import SubmitResult
from ..pipeline.analyzer import FeedbackAnalyzer
from ..providers.base import InferenceProvider
from ..providers.ollama import OllamaProvider
from ..storage import FeedbackStore, create_store
from ..utils.device import DeviceIdProvider
from ..utils.error_handling import as_persistence_error
from .batch_submitter import BatchSubmitter

logger = logging.getLogger(__name__)


class FeedbackRepository:
    """Submits, streams and aggregates feedback for one device.

    Analysis never fails, so the only failure a submission can report is a
    storage fault. Blocking store calls run on a bounded thread pool.
    """

    def __init__(
        self,
        analyzer: FeedbackAnalyzer,
        store: FeedbackStore,
        device_ids: DeviceIdProvider | None = None,
        max_workers: int | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the repository.

        Args:
            analyzer: Analysis pipeline
            store: Feedback store
            device_ids: Source of this device's identifier
            max_workers: Size of the store worker pool (defaults to config)
            clock: Timestamp source for new records

        """
        self.analyzer = analyzer
        self.store = store
        self.device_ids = device_ids or DeviceIdProvider()
        self._clock = clock
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or WORKER_POOL_SIZE,
            thread_name_prefix="feedback-store",
        )

    @classmethod
    def create(
        cls,
        provider: InferenceProvider | None = None,
        database_url: str | None = DATABASE_URL,
        device_ids: DeviceIdProvider | None = None,
    ) -> "FeedbackRepository":
        """Wire a repository with the configured provider and store."""
        manager = ModelLifecycleManager(provider or OllamaProvider())
        return cls(
            analyzer=FeedbackAnalyzer(manager),
            store=create_store(database_url),
            device_ids=device_ids,
        )

    @property
    def model_manager(self) -> ModelLifecycleManager:
        return self.analyzer.model_manager

    async def _run_blocking(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args))

    async def get_device_id(self) -> str:
        """This device's identifier, resolved once."""
        return await self._run_blocking(lambda: self.device_ids.device_id)

    async def initialize_ai(self) -> bool:
        """Bring the local model up ahead of the first submission.

        Returns:
            True if the model is ready

        """
        state = await self.analyzer.initialize_model()
        return state.is_ready

    async def submit(
        self, text: str, modality: InputModality = InputModality.TYPED
    ) -> SubmitResult:
        """Analyze and store one piece of feedback.

        Args:
            text: Raw feedback text
            modality: Whether the text was typed or spoken

        Returns:
            SubmitResult with the new record id, or the failure

        """
        if not text or not text.strip():
            return SubmitResult(error=ValidationError("Feedback text is empty"))

        analysis = await self.analyzer.analyze(text)

        try:
            record = FeedbackRecord.from_analysis(
                analysis,
                device_id=await self.get_device_id(),
                input_modality=modality,
                created_at=self._clock(),
            )
            record_id = await self._run_blocking(self.store.insert, record)
        except Exception as e:
            error = as_persistence_error(e, "save feedback")
            logger.error(str(error))
            return SubmitResult(error=error)

        logger.info(f"Stored feedback {record_id} as {record.category.value}")
        return SubmitResult(record_id=record_id)

    async def _stream(
        self, query: Callable[..., list[FeedbackRecord]], *args: Any
    ) -> AsyncIterator[list[FeedbackRecord]]:
        """Yield a snapshot now and a fresh one after every store change."""
        loop = asyncio.get_running_loop()
        changed = asyncio.Event()

        def on_change() -> None:
            loop.call_soon_threadsafe(changed.set)

        self.store.add_change_listener(on_change)
        try:
            while True:
                changed.clear()
                try:
                    records = await self._run_blocking(query, *args)
                except Exception as e:
                    raise as_persistence_error(e, "read feedback") from e
                yield records
                await changed.wait()
        finally:
            self.store.remove_change_listener(on_change)

    def stream_for_device(self, device_id: str) -> AsyncIterator[list[FeedbackRecord]]:
        """Live, newest-first feedback submitted from one device."""
        return self._stream(self.store.list_by_device, device_id)

    async def stream_user_feedback(self) -> AsyncIterator[list[FeedbackRecord]]:
        """Live, newest-first feedback submitted from this device."""
        device_id = await self.get_device_id()
        async with aclosing(self.stream_for_device(device_id)) as stream:
            async for records in stream:
                yield records

    def stream_all(self) -> AsyncIterator[list[FeedbackRecord]]:
        """Live, newest-first feedback from every device."""
        return self._stream(self.store.list_all)

    def stream_by_category(self, category: Category) -> AsyncIterator[list[FeedbackRecord]]:
        """Live, newest-first feedback in one category."""
        return self._stream(self.store.list_by_category, category)

    async def compute_stats(self) -> FeedbackStats:
        """Count feedback in total and per category.

        The counts are separate queries, so concurrent writes can make them
        disagree slightly.
        """
        try:
            total = await self._run_blocking(self.store.count)
            counts = {
                category: await self._run_blocking(self.store.count_by_category, category)
                for category in Category
            }
        except Exception as e:
            raise as_persistence_error(e, "count feedback") from e
        return FeedbackStats(total=total, counts=counts)

    async def delete(self, record_id: int) -> bool:
        """Delete one record by id."""
        try:
            return await self._run_blocking(self.store.delete, record_id)
        except Exception as e:
            raise as_persistence_error(e, f"delete feedback {record_id}") from e

    async def clear_all(self) -> int:
        """Irreversibly delete every stored record.

        Returns:
            Number of records deleted

        """
        try:
            removed = await self._run_blocking(self.store.clear)
        except Exception as e:
            raise as_persistence_error(e, "clear feedback") from e
        logger.info(f"Cleared {removed} feedback records")
        return removed

    async def generate_sample_data(self) -> list[SubmitResult]:
        """Submit the built-in sample feedback through the normal path."""
        return await BatchSubmitter(self).submit_all(SAMPLE_FEEDBACK)

    async def aclose(self) -> None:
        """Shut down the worker pool, store and provider."""
        # Drain pending store calls without blocking the event loop
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, partial(self._executor.shutdown, wait=True))
        self.store.close()
        await self.model_manager.provider.aclose()
