"""Custom exceptions for the ProxyNode feedback pipeline."""


class ProxyNodeError(Exception):
    """Base exception for the ProxyNode feedback pipeline."""

    pass


class ModelLifecycleError(ProxyNodeError):
    """Raised when the inference model cannot be made ready."""

    pass


class ModelNotRegisteredError(ModelLifecycleError):
    """Raised when the provider does not know the requested model."""

    pass


class AvailabilityCheckError(ModelLifecycleError):
    """Raised when the provider fails to answer an availability query."""

    pass


class DownloadFailedError(ModelLifecycleError):
    """Raised when downloading the model fails."""

    pass


class LoadFailedError(ModelLifecycleError):
    """Raised when loading the model into memory fails."""

    pass


class GenerationFailure(ProxyNodeError):
    """Base class for failures of a single generation call."""

    pass


class NotReadyError(GenerationFailure):
    """Raised when generation is requested before the model is ready."""

    pass


class GenerationTimeoutError(GenerationFailure):
    """Raised when a generation call exceeds its timeout."""

    pass


class GenerationError(GenerationFailure):
    """Raised when the provider fails while generating text."""

    pass


class PersistenceError(ProxyNodeError):
    """Raised when the feedback store fails to read or write."""

    pass


class ValidationError(ProxyNodeError):
    """Raised when input validation fails."""

    pass
