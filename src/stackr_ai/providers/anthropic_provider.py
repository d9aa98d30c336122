"""
Anthropic provider implementation with error mapping.
"""

import time
from typing import Any, Dict, Optional

from anthropic import APIConnectionError, APIStatusError, APITimeoutError, AsyncAnthropic
from anthropic import AuthenticationError as AnthropicAuthError
from anthropic import RateLimitError as AnthropicRateLimitError

from stackr_ai.exceptions import AuthenticationError, ProviderError, RateLimitError
from stackr_ai.telemetry import get_logger

from .base import AIProvider, BaseProvider, parse_json_content, payload_to_text
from .openai_provider import DEFAULT_SYSTEM_PROMPT, QUOTA_MESSAGE

logger = get_logger(__name__)


def _error_type(error: APIStatusError) -> Optional[str]:
    body = error.body
    if isinstance(body, dict):
        detail = body.get("error")
        if isinstance(detail, dict):
            return detail.get("type")
    return None


def map_anthropic_error(error: Exception) -> ProviderError:
    """Translate an Anthropic SDK exception into a ``ProviderError``."""
    provider = AIProvider.ANTHROPIC.value
    if isinstance(error, AnthropicAuthError):
        return AuthenticationError("Invalid Anthropic API key", provider=provider, status_code=401)
    if isinstance(error, AnthropicRateLimitError):
        return RateLimitError(error.message, provider=provider, error_code=_error_type(error) or "rate_limit")
    if isinstance(error, APIStatusError):
        return ProviderError(
            error.message,
            provider=provider,
            status_code=error.status_code,
            error_code=_error_type(error),
        )
    if isinstance(error, APITimeoutError):
        return ProviderError("Anthropic request timed out", provider=provider, error_code="timeout")
    if isinstance(error, APIConnectionError):
        return ProviderError(
            "Failed to connect to Anthropic API", provider=provider, error_code="connection_error"
        )
    return ProviderError(f"Unexpected error: {error}", provider=provider)


class AnthropicProvider(BaseProvider):
    """Anthropic messages API answering with a JSON object."""

    provider = AIProvider.ANTHROPIC

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-7-sonnet-20250219",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        timeout: float = 30.0,
        max_tokens: int = 1024,
        client: Optional[AsyncAnthropic] = None,
    ) -> None:
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.client = client or AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def attempt(self, payload: Any) -> Any:
        start_time = time.time()
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=self.system_prompt,
                messages=[{"role": "user", "content": payload_to_text(payload)}],
            )
        except Exception as e:
            raise map_anthropic_error(e) from e

        logger.debug(
            "provider_response",
            provider=self.name,
            model=response.model,
            duration=round(time.time() - start_time, 3),
        )
        text = "".join(block.text for block in response.content if block.type == "text")
        return parse_json_content(text, self.name)

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self.client.models.list(limit=1)
        except Exception as e:
            error = map_anthropic_error(e)
            message = error.message or "Anthropic API error"
            if "quota" in message.lower():
                message = QUOTA_MESSAGE
            return {"status": "error", "message": message}
        return {"status": "active", "message": ""}
