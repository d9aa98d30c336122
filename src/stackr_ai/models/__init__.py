"""Pydantic models for the Stackr AI orchestration layer."""

from .orchestration import CACHE_SOURCE, CacheEntry, OrchestrationRequest, OrchestrationResult
from .settings import DEFAULT_CACHE_TTL, AISettings, SettingsSnapshot

__all__ = [
    "AISettings",
    "SettingsSnapshot",
    "DEFAULT_CACHE_TTL",
    "OrchestrationRequest",
    "OrchestrationResult",
    "CacheEntry",
    "CACHE_SOURCE",
]
