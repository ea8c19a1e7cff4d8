"""
Exception hierarchy for the study engine.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from enum import Enum
from typing import Any


class StudyEngineException(Exception):
    """Base exception for all study engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(StudyEngineException):
    """Raised when a provider is missing credentials or is misconfigured.

    Never retried.
    """

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize configuration error.

        Args:
            message: Error message
            setting: Name of the offending setting
            details: Additional context
        """
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)


class ProviderError(StudyEngineException):
    """Base exception for transient failures of an external provider."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            provider: Provider or model name
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details)


class RateLimitError(ProviderError):
    """Raised when the provider rejects a call because of rate limits or quota."""

    pass


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds its deadline."""

    pass


class ResponseParseError(ProviderError):
    """Raised when a model response holds no usable items."""

    pass


class ContentError(StudyEngineException):
    """Raised when there is nothing to chunk or generate from."""

    pass


class EmbeddingError(StudyEngineException):
    """Raised when embedding generation fails or returns bad vectors."""

    pass


class ClusteringError(StudyEngineException):
    """Raised when the cluster worker fails."""

    pass


class ErrorCategory(str, Enum):
    """Classification of aggregated generation failures."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    PARSE = "parse"
    GENERIC = "generic"


class GenerationError(StudyEngineException):
    """Raised when a generation run produced zero items."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.GENERIC,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize generation error.

        Args:
            message: Error message
            category: Classified failure category
            details: Additional context
        """
        details = details or {}
        details["category"] = category.value
        self.category = category
        super().__init__(message, details)


class StoreError(StudyEngineException):
    """Raised when persistence operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize store error.

        Args:
            message: Error message
            operation: Operation that failed (insert, fetch)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
