"""Local model lifecycle management."""

from .lifecycle import ModelLifecycleManager

__all__ = ["ModelLifecycleManager"]
