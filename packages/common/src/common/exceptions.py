"""Custom exceptions for the exporter."""

from typing import Optional, Dict, Any


class ExporterException(Exception):
    """Base exception for all exporter errors.

    Attributes:
        message: Error message
        context: Additional context about the error
        original_error: Original exception if this wraps another error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        """Initialize exception with context.

        Args:
            message: Error message
            context: Additional context (e.g., namespace, domain_count)
            original_error: Original exception if wrapping
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        """String representation with context."""
        base = self.message
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({ctx_str})"
        if self.original_error:
            base = f"{base} [caused by: {type(self.original_error).__name__}: {self.original_error}]"
        return base


class FatalStartupError(ExporterException):
    """Raised when the exporter cannot go live.

    Covers a missing API key, unusable cluster credentials, an unbindable
    metrics port and a failed initial reconciliation.

    Common context fields:
        - stage: Startup stage that failed
    """

    pass


class TransientLookupError(ExporterException):
    """Raised when a periodic call to the cluster or the threat provider fails.

    Common context fields:
        - namespace: Namespace being listed (cluster failures)
        - domain_count: Number of domains submitted (provider failures)
        - status_code: HTTP status code (if applicable)
    """

    pass


class ConfigurationError(ExporterException):
    """Raised when configuration is invalid.

    Common context fields:
        - field: Invalid flag or variable name
        - value: Offending value
    """

    pass
