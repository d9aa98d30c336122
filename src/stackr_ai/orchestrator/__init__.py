"""Orchestrator module: retry, provider ordering and the orchestration engine."""

from stackr_ai.orchestrator.orchestrator import OrchestrationEngine
from stackr_ai.orchestrator.retry_handler import RetryHandler, is_quota_error, is_retryable_error
from stackr_ai.orchestrator.router import FALLBACK_ORDER, ProviderSelector

__all__ = [
    "OrchestrationEngine",
    "RetryHandler",
    "ProviderSelector",
    "FALLBACK_ORDER",
    "is_quota_error",
    "is_retryable_error",
]
