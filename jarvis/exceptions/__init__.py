"""
Custom exceptions for the application.

Every error carries a ``category`` used by the HTTP layer and analytics.
"""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    category = "internal"


class ValidationError(AppError):
    """Raised when caller input is invalid."""

    category = "validation"


class ConfigurationError(AppError):
    """Raised when configuration is invalid."""

    category = "configuration"


class CacheBackendError(AppError):
    """Raised by a cache backend on I/O failure. Never surfaced to callers."""

    category = "cache"


class AggregatorProviderError(AppError):
    """Raised when a single search provider fails. Always swallowed."""

    category = "search"

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ProviderError(AppError):
    """Raised when the LLM provider fails."""

    category = "provider"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransientProviderError(ProviderError):
    """Retryable provider failure (rate limit, 5xx, empty reply)."""


class NetworkError(TransientProviderError):
    """Connection failure or timeout talking to the provider."""


class PermanentProviderError(ProviderError):
    """Non-retryable provider failure (auth, bad request)."""


class ExhaustedRetriesError(ProviderError):
    """Raised when every completion attempt failed."""

    def __init__(self, attempts: int, last_error: Optional[Exception]):
        super().__init__(
            f"Completion failed after {attempts} attempts. Last error: {last_error}",
            status_code=getattr(last_error, "status_code", None),
        )
        self.attempts = attempts
        self.last_error = last_error


class PipelineError(AppError):
    """Raised when response generation fails."""

    def __init__(
        self,
        message: str,
        category: str = "internal",
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.category = category
        self.cause = cause


class PipelineTimeoutError(PipelineError):
    """Raised when the overall request deadline passes."""

    def __init__(self, timeout_ms: int):
        super().__init__(
            f"Response generation timed out after {timeout_ms} ms", category="timeout"
        )
        self.timeout_ms = timeout_ms
