"""Cache module for the Stackr AI orchestration layer."""

from .cache_key_generator import canonicalize_payload, generate_cache_key
from .cache_store import CacheStore, FileCacheStore, InMemoryCacheStore

__all__ = [
    "CacheStore",
    "FileCacheStore",
    "InMemoryCacheStore",
    "canonicalize_payload",
    "generate_cache_key",
]
