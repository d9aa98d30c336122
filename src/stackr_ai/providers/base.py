"""
Provider catalog and the base class every AI provider integration implements.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict

import orjson

from stackr_ai.telemetry import get_logger

logger = get_logger(__name__)


class AIProvider(str, Enum):
    """Known AI providers.

    Only the members listed in ``DISPATCHABLE_PROVIDERS`` are ever called by
    the orchestration layer; the rest exist as catalog entries for the
    settings surface.
    """

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    PERPLEXITY = "perplexity"
    MISTRAL = "mistral"
    LLAMA = "llama"
    OPEN_ASSISTANT = "open-assistant"
    WHISPER = "whisper"
    SCIKIT = "scikit-learn"
    FASTTEXT = "fasttext"
    JSON_LOGIC = "json-logic"
    T5 = "t5"


DISPATCHABLE_PROVIDERS = (AIProvider.OPENAI, AIProvider.ANTHROPIC, AIProvider.PERPLEXITY)


def payload_to_text(payload: Any) -> str:
    """Render a request payload as prompt text.

    Strings pass through untouched, anything else becomes JSON.
    """
    if isinstance(payload, str):
        return payload
    return orjson.dumps(payload, default=str).decode()


def parse_json_content(content: str | None, provider: str) -> Any:
    """Decode the JSON object a provider was asked to answer with.

    Falls back to ``{"content": <raw text>}`` when the model ignored the
    format instruction, so callers always receive JSON-shaped data.
    """
    if not content:
        return {}
    text = content.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.startswith("json"):
            text = text[4:]
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError:
        logger.warning("provider_returned_non_json", provider=provider, length=len(content))
        return {"content": content}


class BaseProvider(ABC):
    """Abstract base class for AI providers."""

    provider: AIProvider

    @property
    def name(self) -> str:
        return self.provider.value

    @abstractmethod
    async def attempt(self, payload: Any) -> Any:
        """
        Make a single request to the upstream provider.

        Args:
            payload: Request payload (string or JSON-compatible value)

        Returns:
            JSON-compatible result

        Raises:
            ProviderError: With ``status_code``/``error_code`` set from the upstream error
        """

    async def health_check(self) -> Dict[str, Any]:
        """Check that the provider is reachable with the configured credentials."""
        return {"status": "unknown", "message": ""}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.name!r})"
