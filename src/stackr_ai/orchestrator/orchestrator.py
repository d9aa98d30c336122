"""Cache-first, multi-provider request orchestration with retry and fallback."""

import asyncio
import functools
from collections.abc import Callable, Mapping
from typing import Any, Optional, Union

from stackr_ai.cache import CacheStore, InMemoryCacheStore, generate_cache_key
from stackr_ai.exceptions import OrchestrationTimeoutError, ProviderNotConfiguredError
from stackr_ai.models import CACHE_SOURCE, AISettings, OrchestrationRequest, OrchestrationResult
from stackr_ai.providers import AIProvider, BaseProvider, CallableProvider
from stackr_ai.services.settings_store import SettingsStore
from stackr_ai.telemetry import get_logger

from .retry_handler import RetryHandler, is_quota_error
from .router import ProviderSelector

logger = get_logger(__name__)

ProviderLike = Union[BaseProvider, Callable[[], Any]]
ProviderMap = Mapping[Union[AIProvider, str], ProviderLike]


class OrchestrationEngine:
    """Serves requests from the cache, or from the first provider that succeeds.

    Providers are tried strictly one at a time. Quota-class failures move on
    to the next provider when fallback is enabled; any other failure aborts
    the whole request and propagates unchanged.
    """

    def __init__(
        self,
        cache: Optional[CacheStore] = None,
        settings_store: Optional[SettingsStore] = None,
        providers: Optional[ProviderMap] = None,
        retry_handler: Optional[RetryHandler] = None,
        selector: Optional[ProviderSelector] = None,
        initial_delay: Optional[float] = None,
        cache_key_provider: AIProvider = AIProvider.OPENAI,
    ):
        """
        Initialize the engine.

        Args:
            cache: Result cache; defaults to a process-local one
            settings_store: Source of settings when ``execute`` is not given any
            providers: Default provider implementations
            retry_handler: Retry policy runner
            selector: Provider ordering policy
            initial_delay: First backoff delay in seconds; defaults to the retry handler's own
            cache_key_provider: Fixed identity cache keys are scoped to
        """
        self.cache = cache or InMemoryCacheStore()
        self.settings_store = settings_store
        self.providers = providers or {}
        self.retry_handler = retry_handler or RetryHandler()
        self.selector = selector or ProviderSelector()
        self.initial_delay = initial_delay
        self.cache_key_provider = cache_key_provider

    def _current_settings(self) -> AISettings:
        if self.settings_store is not None:
            return self.settings_store.get()
        return AISettings()

    def cache_key(self, payload: Any) -> str:
        """Cache key for a payload, independent of which provider serves it."""
        return generate_cache_key(self.cache_key_provider, payload)

    @staticmethod
    def _resolve(providers: Mapping[AIProvider, ProviderLike], provider: AIProvider) -> BaseProvider:
        implementation = providers.get(provider)
        if implementation is None:
            raise ProviderNotConfiguredError(provider.value)
        if not isinstance(implementation, BaseProvider):
            implementation = CallableProvider(provider, implementation)
        return implementation

    async def execute(
        self,
        payload: Any,
        providers: Optional[ProviderMap] = None,
        preferred_provider: Optional[Union[AIProvider, str]] = None,
        settings: Optional[AISettings] = None,
        timeout: Optional[float] = None,
    ) -> OrchestrationResult:
        """
        Fulfil a request.

        Args:
            payload: Request payload, also the basis of the cache key
            providers: Implementation per provider; defaults to the engine's own
            preferred_provider: Provider to try first; defaults to ``settings.default_provider``
            settings: Policy for this call; defaults to the settings store snapshot
            timeout: Optional deadline in seconds for the whole call

        Returns:
            The result and where it came from

        Raises:
            OrchestrationTimeoutError: If ``timeout`` elapsed first
            ProviderNotConfiguredError: If the walk reaches a provider with no implementation
            Exception: Whatever the last provider tried raised
        """
        if settings is None:
            settings = self._current_settings()
        providers = self.providers if providers is None else providers

        if timeout is None:
            return await self._execute(payload, providers, preferred_provider, settings)

        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                return await self._execute(payload, providers, preferred_provider, settings)
        except TimeoutError:
            if deadline.expired():
                logger.warning("orchestration_timeout", timeout=timeout)
                raise OrchestrationTimeoutError(timeout) from None
            raise

    async def execute_request(
        self,
        request: OrchestrationRequest,
        providers: Optional[ProviderMap] = None,
        settings: Optional[AISettings] = None,
        timeout: Optional[float] = None,
    ) -> OrchestrationResult:
        """Fulfil an ``OrchestrationRequest``."""
        return await self.execute(
            request.payload,
            providers=providers,
            preferred_provider=request.preferred_provider,
            settings=settings,
            timeout=timeout,
        )

    async def _execute(
        self,
        payload: Any,
        providers: ProviderMap,
        preferred_provider: Optional[Union[AIProvider, str]],
        settings: AISettings,
    ) -> OrchestrationResult:
        key = self.cache_key(payload)
        cached = await self.cache.get(key, settings)
        if cached is not None:
            logger.info("serving_cached_result", key=key)
            return OrchestrationResult(data=cached.data, served_by=CACHE_SOURCE)

        preferred = AIProvider(preferred_provider or settings.default_provider)
        order = self.selector.order(preferred, settings.auto_fallback)
        if not order:
            raise ProviderNotConfiguredError(preferred.value)
        available = {AIProvider(k): v for k, v in providers.items()}

        last_error: Optional[Exception] = None
        for provider in order:
            attempt = functools.partial(self._resolve(available, provider).attempt, payload)
            try:
                data = await self.retry_handler.execute(
                    attempt,
                    max_retries=settings.max_retries,
                    initial_delay=self.initial_delay,
                )
            except Exception as e:
                quota = is_quota_error(e)
                logger.warning(
                    "provider_failed",
                    provider=provider.value,
                    error=str(e),
                    error_type=type(e).__name__,
                    quota_exhausted=quota,
                    auto_fallback=settings.auto_fallback,
                )
                if not settings.auto_fallback or not quota:
                    raise
                last_error = e
                continue

            if last_error is not None:
                logger.info("fallback_succeeded", provider=provider.value, preferred=preferred.value)
            await self.cache.put(key, data, settings)
            return OrchestrationResult(data=data, served_by=provider)

        logger.error("all_providers_exhausted", providers=[p.value for p in order])
        raise last_error
