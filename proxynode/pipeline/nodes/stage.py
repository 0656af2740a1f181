"""Shared plumbing for stage nodes that try the model first."""

from typing import TYPE_CHECKING

from langchain_core.runnables import RunnableConfig

from ...exceptions import GenerationFailure

if TYPE_CHECKING:
    from ...ai.lifecycle import ModelLifecycleManager


def get_model_manager(config: RunnableConfig) -> "ModelLifecycleManager":
    """Fetch the lifecycle manager passed in the run configuration."""
    return config["configurable"]["model_manager"]


async def attempt_ai(
    config: RunnableConfig, prompt: str
) -> tuple[str | None, GenerationFailure | None]:
    """Run a stage prompt through the model.

    Args:
        config: Run configuration carrying the model manager
        prompt: Stage prompt

    Returns:
        (trimmed response, None) on success; (None, error) when generation
        failed; (None, None) when the model answered with nothing

    """
    manager = get_model_manager(config)
    timeout = config["configurable"].get("generation_timeout")
    result = await manager.generate(prompt, timeout)
    return result.usable_text, result.error
