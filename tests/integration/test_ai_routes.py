"""Integration tests for the AI admin endpoints."""

from unittest.mock import AsyncMock

import pytest
import structlog
from fastapi.testclient import TestClient

from stackr_ai.cache import InMemoryCacheStore
from stackr_ai.config import Settings
from stackr_ai.models import AISettings
from stackr_ai.providers import AIProvider, CallableProvider
from stackr_ai.server import create_app
from stackr_ai.services import SettingsStore
from stackr_ai.telemetry.logger import add_context_vars, request_id_var


@pytest.fixture
def memory_cache():
    return InMemoryCacheStore()


@pytest.fixture
def openai_provider():
    provider = CallableProvider(AIProvider.OPENAI, AsyncMock(return_value={}))
    provider.health_check = AsyncMock(return_value={"status": "active", "message": ""})
    return provider


@pytest.fixture
def perplexity_provider():
    provider = CallableProvider(AIProvider.PERPLEXITY, AsyncMock(return_value={}))
    provider.health_check = AsyncMock(
        return_value={"status": "error", "message": "API quota exceeded. Please check your billing."}
    )
    return provider


@pytest.fixture
def app(memory_cache, openai_provider, perplexity_provider):
    application = create_app(
        settings=Settings(ENVIRONMENT="test", LOG_FORMAT="json"),
        settings_store=SettingsStore(AISettings()),
        cache=memory_cache,
        providers={AIProvider.OPENAI: openai_provider, AIProvider.PERPLEXITY: perplexity_provider},
    )
    yield application
    structlog.reset_defaults()


@pytest.fixture
def client(app):
    return TestClient(app)


class TestSettingsEndpoints:
    def test_get_settings(self, client):
        response = client.get("/api/ai/settings")

        assert response.status_code == 200
        body = response.json()
        assert body["default_provider"] == "openai"
        assert body["auto_fallback"] is True
        assert body["cache_enabled"] is True
        assert "json-logic" in body["available_providers"]

    def test_patch_settings(self, client):
        response = client.patch(
            "/api/ai/settings",
            json={"default_provider": "anthropic", "auto_fallback": False, "max_retries": 5},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "AI settings updated successfully"
        assert body["settings"]["default_provider"] == "anthropic"
        assert body["settings"]["max_retries"] == 5
        assert body["settings"]["cache_enabled"] is True
        assert client.get("/api/ai/settings").json()["auto_fallback"] is False

    def test_patch_affects_engine(self, client):
        client.patch("/api/ai/settings", json={"max_retries": 2})

        assert client.app.state.engine.settings_store.get().max_retries == 2

    def test_patch_accepts_settings_read_back(self, client):
        body = client.get("/api/ai/settings").json()
        body["max_retries"] = 4

        response = client.patch("/api/ai/settings", json=body)

        assert response.status_code == 200
        assert response.json()["settings"]["max_retries"] == 4

    @pytest.mark.parametrize(
        "body",
        [{"max_retries": 11}, {"default_provider": "gemini"}, {"cache_ttl": 0}, {"colour": "blue"}],
    )
    def test_patch_rejects_invalid(self, client, body):
        response = client.patch("/api/ai/settings", json=body)

        assert response.status_code == 400
        assert response.json()["message"]
        assert client.get("/api/ai/settings").json()["max_retries"] == 3


class TestStatusEndpoint:
    def test_reports_each_provider(self, client):
        response = client.get("/api/ai/status")

        assert response.status_code == 200
        assert response.json() == {
            "openai": {"status": "active", "message": ""},
            "anthropic": {"status": "unknown", "message": "Anthropic API key not configured"},
            "perplexity": {"status": "error", "message": "API quota exceeded. Please check your billing."},
        }


class TestCacheEndpoint:
    def test_clear_cache(self, client, memory_cache):
        memory_cache.records["a"] = {"data": 1, "timestamp": 0}
        memory_cache.records["b"] = {"data": 2, "timestamp": 0}

        response = client.delete("/api/ai/cache")

        assert response.status_code == 200
        assert response.json() == {"removed": 2}
        assert memory_cache.records == {}


class TestAppFactory:
    def test_configures_structured_logging(self, app):
        config = structlog.get_config()

        assert add_context_vars in config["processors"]
        assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)
        assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)

    def test_request_id_echoed(self, client):
        response = client.get("/api/ai/settings", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated_when_missing(self, client):
        response = client.get("/api/ai/settings")

        assert response.headers["X-Request-ID"]

    def test_request_id_bound_while_handling(self, client, monkeypatch):
        store = client.app.state.settings_store
        original_get = store.get
        seen = []

        def recording_get():
            seen.append(request_id_var.get())
            return original_get()

        monkeypatch.setattr(store, "get", recording_get)

        client.get("/api/ai/settings", headers={"X-Request-ID": "req-456"})

        assert seen == ["req-456"]
        assert request_id_var.get() == ""

    @pytest.mark.asyncio
    async def test_engine_shares_cache_and_providers(self, app, memory_cache):
        assert app.state.cache is memory_cache
        assert app.state.engine.cache is memory_cache

        result = await app.state.engine.execute({"question": "budget"})

        assert result.served_by == AIProvider.OPENAI
        assert memory_cache.records
