"""Request, result and cache record models for the orchestration layer."""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from stackr_ai.providers.base import AIProvider

CACHE_SOURCE = "cache"


class OrchestrationRequest(BaseModel):
    """A request to fulfil through the provider chain."""

    model_config = ConfigDict(frozen=True)

    payload: Any = Field(..., description="Request payload, a string or JSON-compatible value")
    preferred_provider: Optional[AIProvider] = Field(
        default=None, description="Provider to try first; defaults to the configured one"
    )


class OrchestrationResult(BaseModel):
    """Outcome of a successful orchestration."""

    data: Any = Field(..., description="Result produced by the provider or the cache")
    served_by: Union[AIProvider, Literal["cache"]] = Field(
        ..., description="Provider that answered, or 'cache'"
    )

    @property
    def cached(self) -> bool:
        return self.served_by == CACHE_SOURCE


class CacheEntry(BaseModel):
    """One persisted result."""

    key: str
    data: Any
    timestamp: int = Field(..., description="Creation time in epoch milliseconds")

    def age_seconds(self, now: float) -> float:
        return now - self.timestamp / 1000
