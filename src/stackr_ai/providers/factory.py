"""Build provider integrations from process configuration."""

from typing import Dict

from stackr_ai.config import Settings
from stackr_ai.telemetry import get_logger

from .anthropic_provider import AnthropicProvider
from .base import AIProvider, BaseProvider
from .openai_provider import OpenAIProvider, PerplexityProvider

logger = get_logger(__name__)


def build_providers(settings: Settings, system_prompt: str | None = None) -> Dict[AIProvider, BaseProvider]:
    """Create a provider for every upstream whose API key is configured."""
    extra = {"system_prompt": system_prompt} if system_prompt else {}
    providers: Dict[AIProvider, BaseProvider] = {}

    if settings.openai_api_key:
        providers[AIProvider.OPENAI] = OpenAIProvider(
            settings.openai_api_key.get_secret_value(),
            model=settings.openai_model,
            timeout=settings.request_timeout,
            max_tokens=settings.max_tokens,
            **extra,
        )
    else:
        logger.warning("OPENAI_API_KEY not set. OpenAI functionality will be disabled.")

    if settings.anthropic_api_key:
        providers[AIProvider.ANTHROPIC] = AnthropicProvider(
            settings.anthropic_api_key.get_secret_value(),
            model=settings.anthropic_model,
            timeout=settings.request_timeout,
            max_tokens=settings.max_tokens,
            **extra,
        )
    else:
        logger.warning("ANTHROPIC_API_KEY not set. Anthropic functionality will be disabled.")

    if settings.perplexity_api_key:
        providers[AIProvider.PERPLEXITY] = PerplexityProvider(
            settings.perplexity_api_key.get_secret_value(),
            model=settings.perplexity_model,
            base_url=settings.perplexity_base_url,
            timeout=settings.request_timeout,
            max_tokens=settings.max_tokens,
            **extra,
        )
    else:
        logger.warning("PERPLEXITY_API_KEY not set. Perplexity functionality will be disabled.")

    return providers
