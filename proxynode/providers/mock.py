"""Mock inference provider for running without a local model server.

This simulates a small local model: it answers stage prompts with plausible
output derived from the feedback embedded in the prompt, and can be told to
fail or stall at any step.
"""

import asyncio
from collections.abc import AsyncIterator, Callable, Sequence

from ..pipeline import rule_based
from ..pipeline.prompts import StagePrompt, detect_stage, extract_feedback
from .base import InferenceProvider, ModelAvailability


class MockInferenceProvider(InferenceProvider):
    """Scriptable in-process provider."""

    def __init__(
        self,
        exists: bool = True,
        downloaded: bool = True,
        download_steps: Sequence[float] = (0.25, 0.5, 0.75, 1.0),
        load_result: bool = True,
        generate_fn: Callable[[str], str] | None = None,
        check_error: Exception | None = None,
        download_error: Exception | None = None,
        load_error: Exception | None = None,
        generate_error: Exception | None = None,
        step_delay: float = 0.0,
        generate_delay: float = 0.0,
    ) -> None:
        self.exists = exists
        self.downloaded = downloaded
        self.download_steps = list(download_steps)
        self.load_result = load_result
        self.generate_fn = generate_fn or self._simulate
        self.check_error = check_error
        self.download_error = download_error
        self.load_error = load_error
        self.generate_error = generate_error
        self.step_delay = step_delay
        self.generate_delay = generate_delay

        self.check_calls = 0
        self.download_calls = 0
        self.load_calls = 0
        self.prompts: list[str] = []

    @property
    def generate_calls(self) -> int:
        return len(self.prompts)

    async def check_availability(self, model_id: str) -> ModelAvailability:
        self.check_calls += 1
        await asyncio.sleep(self.step_delay)
        if self.check_error:
            raise self.check_error
        return ModelAvailability(exists=self.exists, is_downloaded=self.downloaded)

    async def download(self, model_id: str) -> AsyncIterator[float]:
        self.download_calls += 1
        for progress in self.download_steps:
            await asyncio.sleep(self.step_delay)
            yield progress
        if self.download_error:
            raise self.download_error
        self.downloaded = True

    async def load(self, model_id: str) -> bool:
        self.load_calls += 1
        await asyncio.sleep(self.step_delay)
        if self.load_error:
            raise self.load_error
        return self.load_result

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.generate_delay:
            await asyncio.sleep(self.generate_delay)
        if self.generate_error:
            raise self.generate_error
        return self.generate_fn(prompt)

    @staticmethod
    def _simulate(prompt: str) -> str:
        feedback = extract_feedback(prompt)
        stage = detect_stage(prompt)
        if stage is StagePrompt.ANONYMIZE:
            return rule_based.anonymize(feedback)
        if stage is StagePrompt.SUMMARIZE:
            return rule_based.summarize(feedback)
        if stage is StagePrompt.CLASSIFY:
            return rule_based.classify(feedback).value
        return feedback
