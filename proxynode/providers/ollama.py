"""Inference provider backed by a local Ollama server."""

import logging
from collections.abc import AsyncIterator

import httpx
from langchain_core.output_parsers import StrOutputParser
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, Field

from ..config import MODEL_CONFIG, MODEL_REGISTRY
from .base import InferenceProvider, ModelAvailability

logger = logging.getLogger(__name__)


class LocalModel(BaseModel):
    """A model present in the local Ollama library."""

    name: str = Field(description="Model tag, e.g. smollm2:360m")


class TagsResponse(BaseModel):
    """Schema for GET /api/tags."""

    models: list[LocalModel] = Field(default_factory=list)


class PullStatus(BaseModel):
    """One line of the streamed POST /api/pull response."""

    status: str = ""
    digest: str | None = None
    total: int | None = None
    completed: int | None = None
    error: str | None = None


def _tag_matches(tag: str, installed: str) -> bool:
    if installed == tag:
        return True
    # Ollama reports untagged pulls as "<name>:latest"
    return ":" not in tag and installed == f"{tag}:latest"


class OllamaProvider(InferenceProvider):
    """Talks to Ollama's native API for model management and to its
    OpenAI-compatible endpoint for generation.

    Logical model identifiers (for example ``"SmolLM2 360M Q8_0"``) are
    mapped to Ollama tags through a registry; identifiers missing from the
    registry are reported as not existing.
    """

    def __init__(
        self,
        base_url: str | None = None,
        registry: dict[str, str] | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            base_url: Ollama server URL (defaults to config)
            registry: Mapping of model identifiers to Ollama tags
            timeout: Timeout in seconds for management requests
            transport: Optional httpx transport (used by tests)

        """
        self.base_url = (base_url or str(MODEL_CONFIG["ollama_url"])).rstrip("/")
        self.registry = dict(registry if registry is not None else MODEL_REGISTRY)
        self.timeout = timeout or float(MODEL_CONFIG["request_timeout"])
        self._transport = transport
        self._chain: Runnable | None = None
        self._loaded_tag: str | None = None

    def register_model(self, model_id: str, tag: str) -> None:
        """Make a model identifier known to this provider."""
        self.registry[model_id] = tag

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        )

    def _resolve(self, model_id: str) -> str:
        tag = self.registry.get(model_id)
        if tag is None:
            raise KeyError(f"Model {model_id!r} is not registered")
        return tag

    async def check_availability(self, model_id: str) -> ModelAvailability:
        tag = self.registry.get(model_id)
        if tag is None:
            logger.warning(f"Model {model_id!r} not in registry")
            return ModelAvailability(exists=False)

        async with self._client() as client:
            response = await client.get("/api/tags")
            response.raise_for_status()
            tags = TagsResponse.model_validate(response.json())

        installed = [m.name for m in tags.models]
        downloaded = any(_tag_matches(tag, name) for name in installed)
        logger.debug(f"Installed models: {installed}; {tag} downloaded={downloaded}")
        return ModelAvailability(exists=True, is_downloaded=downloaded)

    async def download(self, model_id: str) -> AsyncIterator[float]:
        tag = self._resolve(model_id)
        # Ollama reports progress per layer; track every layer to get an
        # overall fraction
        totals: dict[str, int] = {}
        completed: dict[str, int] = {}

        async with self._client() as client:
            async with client.stream(
                "POST", "/api/pull", json={"model": tag, "stream": True}
            ) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    status = PullStatus.model_validate_json(line)
                    if status.error:
                        raise RuntimeError(f"Pull of {tag} failed: {status.error}")
                    if status.digest and status.total:
                        totals[status.digest] = status.total
                        completed[status.digest] = status.completed or 0
                        yield sum(completed.values()) / sum(totals.values())
                    elif status.status == "success":
                        yield 1.0

    async def load(self, model_id: str) -> bool:
        tag = self._resolve(model_id)

        # A generate request without a prompt loads the model and returns
        async with self._client() as client:
            response = await client.post(
                "/api/generate", json={"model": tag, "keep_alive": "30m"}
            )

        if response.status_code != 200:
            logger.error(f"Ollama refused to load {tag}: HTTP {response.status_code}")
            return False

        llm = ChatOpenAI(
            model=tag,
            base_url=f"{self.base_url}/v1",
            api_key="ollama",
            temperature=float(MODEL_CONFIG["temperature"]),
            max_tokens=int(MODEL_CONFIG["max_tokens"]),
            timeout=self.timeout,
        )
        self._chain = llm | StrOutputParser()
        self._loaded_tag = tag
        return True

    async def generate(self, prompt: str) -> str:
        if self._chain is None:
            raise RuntimeError("No model loaded")
        return await self._chain.ainvoke(prompt)
