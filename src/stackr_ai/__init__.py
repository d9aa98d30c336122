"""Stackr AI: resilient multi-provider orchestration for AI financial advice."""

__version__ = "1.0.0"


def get_version():
    return __version__


from stackr_ai.cache import FileCacheStore, InMemoryCacheStore
from stackr_ai.models import AISettings, OrchestrationRequest, OrchestrationResult
from stackr_ai.orchestrator import OrchestrationEngine, ProviderSelector, RetryHandler
from stackr_ai.providers import AIProvider, BaseProvider, CallableProvider
from stackr_ai.services import SettingsStore

__all__ = [
    "__version__",
    "get_version",
    "AIProvider",
    "AISettings",
    "BaseProvider",
    "CallableProvider",
    "FileCacheStore",
    "InMemoryCacheStore",
    "OrchestrationEngine",
    "OrchestrationRequest",
    "OrchestrationResult",
    "ProviderSelector",
    "RetryHandler",
    "SettingsStore",
]
