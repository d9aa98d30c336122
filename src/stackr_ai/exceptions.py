"""Custom exceptions for the Stackr AI orchestration layer."""

from typing import Any, Dict, Optional


class StackrAIException(Exception):
    """Base exception for the Stackr AI orchestration layer."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.status_code = status_code
        self.details = details or {}


class ProviderError(StackrAIException):
    """Failure reported by an upstream AI provider.

    ``status_code`` and ``error_code`` mirror what the upstream API returned
    and drive retry and fallback classification.
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, details=details)
        # upstream errors without a status keep it unset so they never look retryable
        self.status_code = status_code
        self.error_code = error_code
        self.provider = provider
        if provider:
            self.details["provider"] = provider


class RateLimitError(ProviderError):
    """Upstream rate limit hit (HTTP 429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider: Optional[str] = None,
        retry_after: Optional[float] = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", "rate_limit")
        super().__init__(message, provider=provider, status_code=429, **kwargs)
        self.retry_after = retry_after


class QuotaExceededError(ProviderError):
    """Provider usage allowance exhausted."""

    def __init__(self, message: str = "Quota exceeded", provider: Optional[str] = None, **kwargs):
        kwargs.setdefault("status_code", 429)
        super().__init__(message, provider=provider, error_code="insufficient_quota", **kwargs)


class AuthenticationError(ProviderError):
    """Invalid or missing provider API key."""

    pass


class ProviderNotConfiguredError(StackrAIException):
    """A provider was selected for dispatch but no implementation was supplied."""

    def __init__(self, provider: str):
        super().__init__(
            f"No implementation configured for provider '{provider}'",
            error_code="PROVIDER_NOT_CONFIGURED",
            status_code=503,
            details={"provider": provider},
        )
        self.provider = provider


class OrchestrationTimeoutError(StackrAIException):
    """The orchestration did not finish within the caller's deadline."""

    def __init__(self, timeout: float):
        super().__init__(
            f"AI request did not complete within {timeout}s",
            error_code="ORCHESTRATION_TIMEOUT",
            status_code=504,
            details={"timeout": timeout},
        )
        self.timeout = timeout


class SettingsValidationError(StackrAIException):
    """Rejected AI settings update."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, error_code="VALIDATION_ERROR", status_code=400, **kwargs)
        if field:
            self.details["field"] = field


__all__ = [
    "StackrAIException",
    "ProviderError",
    "RateLimitError",
    "QuotaExceededError",
    "AuthenticationError",
    "ProviderNotConfiguredError",
    "OrchestrationTimeoutError",
    "SettingsValidationError",
]
