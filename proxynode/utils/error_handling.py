"""Standardized error handling utilities for the feedback pipeline."""

from typing import Any

from ..exceptions import PersistenceError, ProxyNodeError


def error_kind(error: Exception | None) -> str:
    """Short name for an error, e.g. ``GenerationTimeout``.

    Args:
        error: The error to describe

    Returns:
        Class name without the ``Error`` suffix, or ``"Empty"`` for None

    """
    if error is None:
        return "Empty"
    name = type(error).__name__
    return name[: -len("Error")] if name.endswith("Error") else name


def as_persistence_error(error: Exception, action: str) -> PersistenceError:
    """Wrap a store failure in a PersistenceError.

    Args:
        error: The underlying exception
        action: What the store was doing, e.g. "insert feedback"

    Returns:
        PersistenceError chained to the original exception

    """
    if isinstance(error, PersistenceError):
        return error
    wrapped = PersistenceError(f"Failed to {action}: {error}")
    wrapped.__cause__ = error
    return wrapped


def record_stage_outcome(
    state: dict[str, Any],
    stage: str,
    path: str,
    error: ProxyNodeError | None = None,
) -> dict[str, dict[str, str]]:
    """Build the bookkeeping update for a finished stage.

    Args:
        state: The current analysis state
        stage: Stage name
        path: "ai" or "fallback"
        error: Why the stage fell back, if it did

    Returns:
        Partial state update with merged ``stage_paths`` and ``stage_errors``

    """
    paths = dict(state.get("stage_paths") or {})
    errors = dict(state.get("stage_errors") or {})
    paths[stage] = path
    if path == "fallback":
        errors[stage] = error_kind(error)
    return {"stage_paths": paths, "stage_errors": errors}
