"""Runtime AI settings models."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from stackr_ai.providers.base import AIProvider

DEFAULT_CACHE_TTL = 60 * 60 * 24 * 7  # 7 days


class AISettings(BaseModel):
    """Immutable snapshot of the orchestration policy."""

    model_config = ConfigDict(frozen=True, extra="forbid", use_enum_values=False)

    cache_enabled: bool = Field(default=True, description="Serve and store results in the cache")
    cache_ttl: float = Field(default=DEFAULT_CACHE_TTL, ge=1, description="Cache entry lifetime in seconds")
    default_provider: AIProvider = Field(default=AIProvider.OPENAI, description="Provider tried first")
    auto_fallback: bool = Field(default=True, description="Try other providers on quota failures")
    max_retries: int = Field(default=3, ge=1, le=10, description="Attempts per provider")


class SettingsSnapshot(AISettings):
    """Settings as exposed to callers, with the provider catalog attached."""

    available_providers: List[AIProvider] = Field(default_factory=lambda: list(AIProvider))
