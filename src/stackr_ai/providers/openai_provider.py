"""
OpenAI-compatible providers (OpenAI and Perplexity) with error mapping.
"""

import time
from typing import Any, Dict, List, Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI
from openai import AuthenticationError as OpenAIAuthError
from openai import RateLimitError as OpenAIRateLimitError
from openai.types.chat import ChatCompletionMessageParam

from stackr_ai.exceptions import (
    AuthenticationError,
    ProviderError,
    QuotaExceededError,
    RateLimitError,
)
from stackr_ai.telemetry import get_logger

from .base import AIProvider, BaseProvider, parse_json_content, payload_to_text

logger = get_logger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a personal finance assistant. Answer with a single JSON object."
)

QUOTA_MESSAGE = "API quota exceeded. Please check your billing."


def map_openai_error(error: Exception, provider: str) -> ProviderError:
    """Translate an OpenAI SDK exception into a ``ProviderError``."""
    if isinstance(error, OpenAIAuthError):
        return AuthenticationError(
            f"Invalid {provider} API key", provider=provider, status_code=401
        )
    if isinstance(error, OpenAIRateLimitError):
        if error.code == "insufficient_quota":
            return QuotaExceededError(error.message, provider=provider)
        return RateLimitError(error.message, provider=provider, error_code=error.code or "rate_limit")
    if isinstance(error, APIStatusError):
        return ProviderError(
            error.message, provider=provider, status_code=error.status_code, error_code=error.code
        )
    if isinstance(error, APITimeoutError):
        return ProviderError(f"{provider} request timed out", provider=provider, error_code="timeout")
    if isinstance(error, APIConnectionError):
        return ProviderError(
            f"Failed to connect to {provider} API", provider=provider, error_code="connection_error"
        )
    return ProviderError(f"Unexpected error: {error}", provider=provider)


class OpenAIProvider(BaseProvider):
    """OpenAI chat completions answering in JSON mode."""

    provider = AIProvider.OPENAI
    json_mode = True

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        max_tokens: Optional[int] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """
        Initialize OpenAI provider.

        Args:
            api_key: API key
            model: Model identifier
            system_prompt: Instructions sent ahead of every payload
            base_url: Override for OpenAI-compatible endpoints
            timeout: Request timeout in seconds
            max_tokens: Maximum tokens in response
            client: Preconfigured client, mainly for tests
        """
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        # Retries belong to the orchestration layer
        self.client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )

    def _build_messages(self, payload: Any) -> List[ChatCompletionMessageParam]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": payload_to_text(payload)},
        ]

    async def attempt(self, payload: Any) -> Any:
        create_kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": self._build_messages(payload),
        }
        if self.json_mode:
            create_kwargs["response_format"] = {"type": "json_object"}
        if self.max_tokens:
            create_kwargs["max_tokens"] = self.max_tokens

        start_time = time.time()
        try:
            response = await self.client.chat.completions.create(**create_kwargs)
        except Exception as e:
            raise map_openai_error(e, self.name) from e

        logger.debug(
            "provider_response",
            provider=self.name,
            model=response.model,
            duration=round(time.time() - start_time, 3),
        )
        return parse_json_content(response.choices[0].message.content, self.name)

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self.client.models.list()
        except Exception as e:
            error = map_openai_error(e, self.name)
            message = error.message or f"{self.name} API error"
            if error.error_code == "insufficient_quota" or "quota" in message.lower():
                message = QUOTA_MESSAGE
            return {"status": "error", "message": message}
        return {"status": "active", "message": ""}


class PerplexityProvider(OpenAIProvider):
    """Perplexity through its OpenAI-compatible API."""

    provider = AIProvider.PERPLEXITY
    # Perplexity rejects response_format=json_object
    json_mode = False

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.1-sonar-small-128k-online",
        base_url: str = "https://api.perplexity.ai",
        **kwargs,
    ) -> None:
        super().__init__(api_key, model=model, base_url=base_url, **kwargs)

    async def health_check(self) -> Dict[str, Any]:
        # No model listing endpoint; a one-token completion proves the key works
        try:
            await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": "ping"}],
                max_tokens=1,
            )
        except Exception as e:
            error = map_openai_error(e, self.name)
            message = error.message or f"{self.name} API error"
            lowered = message.lower()
            if error.error_code == "insufficient_quota" or "quota" in lowered or "limit" in lowered:
                message = QUOTA_MESSAGE
            return {"status": "error", "message": message}
        return {"status": "active", "message": ""}
