"""Inference providers."""

from .base import InferenceProvider, ModelAvailability
from .mock import MockInferenceProvider
from .ollama import OllamaProvider

__all__ = [
    "InferenceProvider",
    "MockInferenceProvider",
    "ModelAvailability",
    "OllamaProvider",
]
