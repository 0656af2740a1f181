"""Lifecycle management for the local inference model.

The manager owns the model state machine::

    UNINITIALIZED -> CHECKING_AVAILABILITY -> [DOWNLOADING ->] LOADING_INTO_MEMORY -> READY

Any step can move to FAILED. ``ensure_ready`` is single-flight: callers that
arrive while an attempt is running await that same attempt instead of
starting another download or load. Attempts are shielded, so a caller that
gives up does not cancel the work other callers are waiting on.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable

from ..config import MODEL_CONFIG
from ..exceptions import (
    AvailabilityCheckError,
    DownloadFailedError,
    GenerationError,
    GenerationTimeoutError,
    LoadFailedError,
    ModelLifecycleError,
    ModelNotRegisteredError,
    NotReadyError,
)
from ..models.model_state import ModelPhase, ModelState
from ..models.results import GenerationResult
from ..providers.base import InferenceProvider

logger = logging.getLogger(__name__)

StateListener = Callable[[ModelState], None]


class ModelLifecycleManager:
    """Makes one model available through an inference provider."""

    def __init__(
        self,
        provider: InferenceProvider,
        model_id: str | None = None,
        generation_timeout: float | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            provider: Backend used to check, download, load and generate
            model_id: Model identifier (defaults to config)
            generation_timeout: Default per-call generation timeout in seconds

        """
        self.provider = provider
        self.model_id = model_id or str(MODEL_CONFIG["model_id"])
        self.generation_timeout = (
            generation_timeout
            if generation_timeout is not None
            else float(MODEL_CONFIG["generation_timeout"])
        )
        self._state = ModelState.uninitialized()
        self._attempt: asyncio.Task[ModelState] | None = None
        self._listeners: list[StateListener] = []
        self._watchers: set[asyncio.Queue[ModelState]] = set()

    @property
    def state(self) -> ModelState:
        return self._state

    def is_ready(self) -> bool:
        """Non-blocking readiness check."""
        return self._state.is_ready

    def add_state_listener(self, listener: StateListener) -> None:
        """Call ``listener`` on every state transition."""
        self._listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def watch_state(self) -> AsyncIterator[ModelState]:
        """Yield the current state and every later transition.

        The sequence ends after a READY or FAILED state has been yielded.
        Watching never triggers an attempt by itself.
        """
        queue: asyncio.Queue[ModelState] = asyncio.Queue()
        self._watchers.add(queue)
        try:
            state = self._state
            yield state
            while state.phase not in (ModelPhase.READY, ModelPhase.FAILED):
                state = await queue.get()
                yield state
        finally:
            self._watchers.discard(queue)

    def _set_state(self, state: ModelState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Model state listener raised")
        for queue in self._watchers:
            queue.put_nowait(state)

    async def ensure_ready(self) -> ModelState:
        """Bring the model to READY, or report why it could not.

        Returns:
            The READY state, or a FAILED state carrying the error

        """
        if self._state.is_ready:
            return self._state

        if self._attempt is None or self._attempt.done():
            self._attempt = asyncio.create_task(self._run_attempt())
        else:
            logger.debug("Joining in-flight model initialization")

        return await asyncio.shield(self._attempt)

    async def _run_attempt(self) -> ModelState:
        # Resume an interrupted sequence from the step it stopped at; a
        # failed or fresh manager starts from the availability check
        phase = self._state.phase
        try:
            if phase is ModelPhase.LOADING_INTO_MEMORY:
                pass
            elif phase is ModelPhase.DOWNLOADING:
                await self._download()
            else:
                logger.info(f"Initializing model {self.model_id}...")
                self._set_state(ModelState.checking())
                if not await self._check_downloaded():
                    await self._download()

            self._set_state(ModelState.loading())
            await self._load()

        except ModelLifecycleError as e:
            logger.error(f"Model initialization failed: {e}")
            self._set_state(ModelState.failed(e))
            return self._state

        logger.info(f"Model {self.model_id} loaded successfully")
        self._set_state(ModelState.ready())
        return self._state

    async def _check_downloaded(self) -> bool:
        try:
            availability = await self.provider.check_availability(self.model_id)
        except Exception as e:
            raise AvailabilityCheckError(
                f"Availability check for {self.model_id} failed: {e}"
            ) from e

        if not availability.exists:
            raise ModelNotRegisteredError(f"Model {self.model_id} not found")
        return availability.is_downloaded

    async def _download(self) -> None:
        logger.info(f"Downloading model {self.model_id}...")
        last = 0.0
        self._set_state(ModelState.downloading(last))
        try:
            async for value in self.provider.download(self.model_id):
                # Progress never goes backwards and stays within [0, 1]
                progress = min(1.0, max(last, float(value)))
                if progress != last:
                    last = progress
                    logger.debug(f"Download progress: {int(progress * 100)}%")
                    self._set_state(ModelState.downloading(progress))
        except Exception as e:
            raise DownloadFailedError(f"Download of {self.model_id} failed: {e}") from e

    async def _load(self) -> None:
        logger.info(f"Loading model {self.model_id}...")
        try:
            loaded = await self.provider.load(self.model_id)
        except Exception as e:
            raise LoadFailedError(f"Loading {self.model_id} failed: {e}") from e

        if not loaded:
            raise LoadFailedError(f"Provider could not load {self.model_id}")

    async def generate(self, prompt: str, timeout: float | None = None) -> GenerationResult:
        """Run one prompt through the loaded model.

        Failures are returned, not raised, and never change the model state.

        Args:
            prompt: Instruction prompt
            timeout: Seconds to wait (defaults to ``generation_timeout``)

        Returns:
            GenerationResult with text or a typed error

        """
        if not self._state.is_ready:
            return GenerationResult(
                error=NotReadyError(f"Model is {self._state.describe()}, not ready")
            )

        timeout = self.generation_timeout if timeout is None else timeout
        try:
            text = await asyncio.wait_for(self.provider.generate(prompt), timeout)
        except (asyncio.TimeoutError, TimeoutError):
            return GenerationResult(
                error=GenerationTimeoutError(f"Generation timed out after {timeout:.1f}s")
            )
        except Exception as e:
            return GenerationResult(error=GenerationError(f"Generation failed: {e}"))

        if not isinstance(text, str):
            return GenerationResult(
                error=GenerationError(f"Provider returned {type(text).__name__}, not text")
            )
        return GenerationResult(text=text)
