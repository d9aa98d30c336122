"""Pytest configuration and fixtures."""

from typing import Any, List

import pytest

from stackr_ai.cache import InMemoryCacheStore
from stackr_ai.exceptions import ProviderError, QuotaExceededError
from stackr_ai.models import AISettings
from stackr_ai.orchestrator import OrchestrationEngine, RetryHandler
from stackr_ai.providers import AIProvider, BaseProvider
from stackr_ai.services import SettingsStore


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleeper:
    """Async sleep that returns immediately and remembers each delay."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class ScriptedProvider(BaseProvider):
    """Provider replaying a fixed list of outcomes; the last one repeats."""

    def __init__(self, provider: AIProvider, outcomes: List[Any]):
        self.provider = provider
        self.outcomes = list(outcomes)
        self.calls = 0
        self.payloads: List[Any] = []

    async def attempt(self, payload: Any) -> Any:
        self.payloads.append(payload)
        outcome = self.outcomes[min(self.calls, len(self.outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def quota_error(provider: str = "openai") -> QuotaExceededError:
    return QuotaExceededError("You exceeded your current quota", provider=provider)


def server_error(provider: str = "openai") -> ProviderError:
    return ProviderError("Upstream unavailable", provider=provider, status_code=503)


def fatal_error(provider: str = "openai") -> ProviderError:
    return ProviderError("Invalid request payload", provider=provider, status_code=400)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeper():
    return RecordingSleeper()


@pytest.fixture
def cache(clock):
    return InMemoryCacheStore(clock=clock)


@pytest.fixture
def ai_settings():
    return AISettings(
        cache_enabled=True,
        cache_ttl=3600,
        default_provider=AIProvider.OPENAI,
        auto_fallback=True,
        max_retries=3,
    )


@pytest.fixture
def settings_store(ai_settings):
    return SettingsStore(ai_settings)


@pytest.fixture
def engine(cache, settings_store, sleeper):
    return OrchestrationEngine(
        cache=cache,
        settings_store=settings_store,
        retry_handler=RetryHandler(sleep=sleeper),
        initial_delay=0.001,
    )


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


@pytest.fixture
def errors():
    """Factories for the three classes of upstream failure."""

    class Errors:
        quota = staticmethod(quota_error)
        server = staticmethod(server_error)
        fatal = staticmethod(fatal_error)

    return Errors
