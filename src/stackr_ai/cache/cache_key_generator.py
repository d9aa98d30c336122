"""
Deterministic cache keys for orchestration requests.
"""

import hashlib
from typing import Any

import orjson
from pydantic import BaseModel

from stackr_ai.providers.base import AIProvider


def _default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    return str(value)


def canonicalize_payload(payload: Any) -> str:
    """
    Serialize a payload so equal values always produce equal text.

    Strings are used verbatim; anything else becomes compact JSON with
    sorted object keys.
    """
    if isinstance(payload, str):
        return payload
    return orjson.dumps(
        payload,
        default=_default,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
    ).decode()


def generate_cache_key(provider: AIProvider | str, payload: Any) -> str:
    """
    Generate the cache key for a provider and payload.

    Args:
        provider: Provider identity the key is scoped to
        payload: Request payload

    Returns:
        Hex SHA-256 digest, safe to use as a file name
    """
    provider_id = provider.value if isinstance(provider, AIProvider) else str(provider)
    key_string = f"{provider_id}-{canonicalize_payload(payload)}"
    return hashlib.sha256(key_string.encode("utf-8")).hexdigest()
