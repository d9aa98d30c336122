"""Unit tests for cache key generation."""

import hashlib

from stackr_ai.cache import canonicalize_payload, generate_cache_key
from stackr_ai.models import OrchestrationRequest
from stackr_ai.providers import AIProvider


class TestCacheKeyGenerator:
    """Deterministic, provider-scoped keys."""

    def test_same_input_same_key(self):
        payload = {"question": "save more", "income": [{"amount": 5000}]}
        assert generate_cache_key(AIProvider.OPENAI, payload) == generate_cache_key(
            AIProvider.OPENAI, {"income": [{"amount": 5000}], "question": "save more"}
        )

    def test_key_digests_provider_and_payload(self):
        expected = hashlib.sha256(b'openai-{"question":"save more"}').hexdigest()
        assert generate_cache_key(AIProvider.OPENAI, {"question": "save more"}) == expected

    def test_different_payload_different_key(self):
        assert generate_cache_key(AIProvider.OPENAI, {"q": "a"}) != generate_cache_key(
            AIProvider.OPENAI, {"q": "b"}
        )

    def test_different_provider_different_key(self):
        assert generate_cache_key(AIProvider.OPENAI, "hi") != generate_cache_key(
            AIProvider.ANTHROPIC, "hi"
        )

    def test_string_and_enum_provider_agree(self):
        assert generate_cache_key("perplexity", [1, 2]) == generate_cache_key(
            AIProvider.PERPLEXITY, [1, 2]
        )

    def test_key_is_filename_safe(self):
        key = generate_cache_key(AIProvider.OPENAI, {"path": "../../etc/passwd"})
        assert len(key) == 64
        assert all(c in "0123456789abcdef" for c in key)

    def test_canonical_form(self):
        assert canonicalize_payload("plain text") == "plain text"
        assert canonicalize_payload({"b": 1, "a": {"d": 2, "c": 3}}) == '{"a":{"c":3,"d":2},"b":1}'

    def test_pydantic_values_are_serialized(self):
        request = OrchestrationRequest(payload={"q": "x"})
        assert canonicalize_payload({"request": request}) == canonicalize_payload(
            {"request": request.model_dump(mode="json")}
        )
