"""Tests for the feedback repository."""

import asyncio
import time
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from proxynode.ai.lifecycle import ModelLifecycleManager
from proxynode.constants import SAMPLE_FEEDBACK
from proxynode.exceptions import PersistenceError, ValidationError
from proxynode.models.category import Category
from proxynode.models.feedback import FeedbackRecord, InputModality
from proxynode.pipeline.analyzer import FeedbackAnalyzer
from proxynode.processing.feedback_repository import FeedbackRepository
from proxynode.providers.mock import MockInferenceProvider
from proxynode.storage import InMemoryFeedbackStore
from proxynode.utils.device import DeviceIdProvider

DEVICE_ID = "device-test"


def build_repository(**provider_kwargs) -> FeedbackRepository:
    provider = MockInferenceProvider(**provider_kwargs)
    return FeedbackRepository(
        analyzer=FeedbackAnalyzer(ModelLifecycleManager(provider, model_id="test-model")),
        store=InMemoryFeedbackStore(),
        device_ids=DeviceIdProvider(device_id=DEVICE_ID),
        max_workers=2,
    )


@pytest_asyncio.fixture
async def repository():
    """Create a repository backed by the mock provider and memory store."""
    repository = build_repository()
    yield repository
    await repository.aclose()


async def next_snapshot(stream, timeout: float = 1.0) -> list[FeedbackRecord]:
    return await asyncio.wait_for(anext(stream), timeout)


class TestSubmit:
    """Test suite for submitting feedback."""

    @pytest.mark.asyncio
    async def test_submit_then_stream(self, repository):
        """Test that a submitted record appears in its device's history."""
        text = "Rahul Verma says the WiFi in the hostel is unusable."

        result = await repository.submit(text)
        assert result.ok

        stream = repository.stream_for_device(DEVICE_ID)
        records = await next_snapshot(stream)
        await stream.aclose()

        assert len(records) == 1
        record = records[0]
        expected = await repository.analyzer.analyze(text)
        assert record.id == result.record_id
        assert record.original_text == text
        assert record.anonymized_text == expected.anonymized_text
        assert record.summary == expected.summary
        assert record.category == expected.category
        assert record.device_id == DEVICE_ID
        assert record.input_modality is InputModality.TYPED

    @pytest.mark.asyncio
    async def test_voice_submission(self, repository):
        result = await repository.submit("Library closes early", InputModality.SPOKEN)

        saved = repository.store.get(result.record_id)
        assert saved.is_voice_input

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_text_rejected(self, repository, text):
        """Test that blank text is refused before any analysis."""
        result = await repository.submit(text)

        assert not result.ok
        assert isinstance(result.error, ValidationError)
        assert repository.store.count() == 0
        assert repository.model_manager.provider.check_calls == 0

    @pytest.mark.asyncio
    async def test_persistence_failure(self, repository):
        """Test that a store failure is reported, not raised."""
        repository.store.insert = MagicMock(side_effect=OSError("disk full"))

        result = await repository.submit("The canteen is dirty")

        assert not result.ok
        assert result.record_id is None
        assert isinstance(result.error, PersistenceError)
        assert isinstance(result.error.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_submit_without_model(self):
        """Test that submissions succeed on the rule-based path."""
        repository = build_repository(exists=False)
        try:
            result = await repository.submit("More companies for placement please")

            saved = repository.store.get(result.record_id)
            assert saved.category == Category.PLACEMENT
        finally:
            await repository.aclose()


class TestStreams:
    """Test suite for live feedback streams."""

    @pytest.mark.asyncio
    async def test_stream_updates_after_submit(self, repository):
        """Test that a stream yields a new snapshot after each write."""
        stream = repository.stream_all()
        assert await next_snapshot(stream) == []

        await repository.submit("The lab equipment is outdated")
        records = await next_snapshot(stream)
        await stream.aclose()

        assert [r.original_text for r in records] == ["The lab equipment is outdated"]

    @pytest.mark.asyncio
    async def test_snapshots_are_newest_first(self, repository):
        """Test that later submissions come first."""
        times = iter([datetime(2024, 1, 1, 10), datetime(2024, 1, 1, 11)])
        repository._clock = lambda: next(times)
        await repository.submit("first exam")
        await repository.submit("second exam")

        stream = repository.stream_all()
        records = await next_snapshot(stream)
        await stream.aclose()

        assert [r.original_text for r in records] == ["second exam", "first exam"]

    @pytest.mark.asyncio
    async def test_user_feedback_is_device_scoped(self, repository):
        """Test that only this device's records are streamed."""
        repository.store.insert(
            FeedbackRecord(
                original_text="someone else",
                anonymized_text="someone else",
                summary="someone else",
                category=Category.OTHER,
                device_id="other-device",
            )
        )
        await repository.submit("my own feedback about the course")

        stream = repository.stream_user_feedback()
        records = await next_snapshot(stream)
        await stream.aclose()

        assert [r.device_id for r in records] == [DEVICE_ID]

    @pytest.mark.asyncio
    async def test_stream_by_category(self, repository):
        await repository.submit("The professor skips every lecture")
        await repository.submit("WiFi in the hostel is down")

        stream = repository.stream_by_category(Category.ACADEMICS)
        records = await next_snapshot(stream)
        await stream.aclose()

        assert [r.category for r in records] == [Category.ACADEMICS]

    @pytest.mark.asyncio
    async def test_streams_are_restartable(self, repository):
        """Test that every call starts a fresh stream from the current data."""
        await repository.submit("Internship support is weak")

        for _ in range(2):
            stream = repository.stream_all()
            assert len(await next_snapshot(stream)) == 1
            await stream.aclose()

    @pytest.mark.asyncio
    async def test_closed_stream_stops_listening(self, repository):
        """Test that closing a stream unregisters its store listener."""
        stream = repository.stream_all()
        await next_snapshot(stream)
        assert len(repository.store._listeners) == 1

        await stream.aclose()

        assert repository.store._listeners == []


class TestMaintenance:
    """Test suite for stats, deletion and seeding."""

    @pytest.mark.asyncio
    async def test_compute_stats(self, repository):
        """Test category counts after several submissions."""
        await repository.submit("The exam syllabus is too long")
        await repository.submit("The professor is great in class")
        await repository.submit("Hostel WiFi is slow")
        await repository.submit("Nothing to say really")

        stats = await repository.compute_stats()

        assert stats.total == 4
        assert stats.academics == 2
        assert stats.infrastructure == 1
        assert stats.placement == 0
        assert stats.other == 1

    @pytest.mark.asyncio
    async def test_clear_all(self, repository):
        """Test that clearing empties the store and live streams."""
        await repository.submit("Library hours are too short")
        stream = repository.stream_all()
        assert len(await next_snapshot(stream)) == 1

        removed = await repository.clear_all()

        assert removed == 1
        assert await next_snapshot(stream) == []
        await stream.aclose()
        assert (await repository.compute_stats()).total == 0

    @pytest.mark.asyncio
    async def test_clear_all_failure_raises_persistence_error(self, repository):
        repository.store.clear = MagicMock(side_effect=RuntimeError("locked"))

        with pytest.raises(PersistenceError):
            await repository.clear_all()

    @pytest.mark.asyncio
    async def test_delete(self, repository):
        result = await repository.submit("Career fair was useful")

        assert await repository.delete(result.record_id) is True
        assert await repository.delete(result.record_id) is False

    @pytest.mark.asyncio
    async def test_generate_sample_data(self, repository):
        """Test that sample feedback goes through the normal submit path."""
        results = await repository.generate_sample_data()

        assert len(results) == len(SAMPLE_FEEDBACK)
        assert all(r.ok for r in results)
        assert repository.store.count() == len(SAMPLE_FEEDBACK)

    @pytest.mark.asyncio
    async def test_initialize_ai(self):
        """Test eager model initialization results."""
        ready = build_repository()
        missing = build_repository(exists=False)
        try:
            assert await ready.initialize_ai() is True
            assert await missing.initialize_ai() is False
        finally:
            await ready.aclose()
            await missing.aclose()

    @pytest.mark.asyncio
    async def test_sample_data_on_fresh_device_uses_one_id(self, tmp_path):
        """Test that concurrent first submissions share one device id."""
        provider = MockInferenceProvider()
        repository = FeedbackRepository(
            analyzer=FeedbackAnalyzer(ModelLifecycleManager(provider, model_id="test-model")),
            store=InMemoryFeedbackStore(),
            device_ids=DeviceIdProvider(path=tmp_path / "device_id"),
            max_workers=4,
        )
        try:
            await repository.generate_sample_data()

            device_ids = {r.device_id for r in repository.store.list_all()}
            own_id = await repository.get_device_id()
            assert device_ids == {own_id}
            assert len(repository.store.list_by_device(own_id)) == len(SAMPLE_FEEDBACK)
        finally:
            await repository.aclose()


class TestClose:
    """Test suite for shutting the repository down."""

    @pytest.mark.asyncio
    async def test_aclose_keeps_event_loop_responsive(self):
        """Test that draining slow store calls does not block other tasks."""
        repository = build_repository()
        pending = asyncio.create_task(repository._run_blocking(time.sleep, 0.3))
        await asyncio.sleep(0.01)

        ticks = 0
        closing = asyncio.create_task(repository.aclose())
        while not closing.done():
            ticks += 1
            await asyncio.sleep(0.01)

        await closing
        await pending
        assert ticks > 5
