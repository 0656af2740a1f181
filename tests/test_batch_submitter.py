"""Tests for concurrent batch submission."""

import asyncio
from unittest.mock import MagicMock

import pytest

from proxynode.exceptions import PersistenceError
from proxynode.models.feedback import InputModality
from proxynode.models.results import SubmitResult
from proxynode.processing.batch_submitter import BatchSubmitter


class FakeRepository:
    """Records submissions and tracks how many run at once."""

    def __init__(self, fail_on: set[str] = frozenset()):
        self.fail_on = fail_on
        self.submitted: list[tuple[str, InputModality]] = []
        self.active = 0
        self.peak = 0

    async def submit(self, text, modality=InputModality.TYPED):
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        self.submitted.append((text, modality))
        if text in self.fail_on:
            return SubmitResult(error=PersistenceError(f"could not save {text}"))
        return SubmitResult(record_id=len(self.submitted))


class TestBatchSubmitter:
    """Test suite for BatchSubmitter."""

    @pytest.mark.asyncio
    async def test_results_in_input_order(self):
        """Test that results line up with the input texts."""
        repository = FakeRepository(fail_on={"b"})
        submitter = BatchSubmitter(repository, max_concurrency=2)

        results = await submitter.submit_all(["a", "b", "c"])

        assert [r.ok for r in results] == [True, False, True]
        assert isinstance(results[1].error, PersistenceError)
        assert len(repository.submitted) == 3

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        repository = FakeRepository()
        submitter = BatchSubmitter(repository, max_concurrency=3)

        await submitter.submit_all([str(i) for i in range(10)])

        assert repository.peak <= 3

    @pytest.mark.asyncio
    async def test_progress_callback(self):
        """Test that progress is reported once per completed submission."""
        callback = MagicMock()
        submitter = BatchSubmitter(FakeRepository(), max_concurrency=2)
        submitter.set_progress_callback(callback)

        await submitter.submit_all(["a", "b", "c", "d"])

        assert [c.args for c in callback.call_args_list] == [(1, 4), (2, 4), (3, 4), (4, 4)]

    @pytest.mark.asyncio
    async def test_modality_passed_through(self):
        repository = FakeRepository()

        await BatchSubmitter(repository).submit_all(["spoken"], InputModality.SPOKEN)

        assert repository.submitted == [("spoken", InputModality.SPOKEN)]

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        assert await BatchSubmitter(FakeRepository()).submit_all([]) == []
