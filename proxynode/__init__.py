"""ProxyNode - privacy-preserving, on-device analysis of student feedback."""

from .config import MODEL_CONFIG, MODEL_REGISTRY
from .exceptions import (
    GenerationFailure,
    ModelLifecycleError,
    PersistenceError,
    ProxyNodeError,
    ValidationError,
)

__version__ = "0.1.0"
__all__ = [
    "MODEL_CONFIG",
    "MODEL_REGISTRY",
    "GenerationFailure",
    "ModelLifecycleError",
    "PersistenceError",
    "ProxyNodeError",
    "ValidationError",
]
