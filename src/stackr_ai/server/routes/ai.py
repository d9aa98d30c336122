"""AI settings, provider status and cache administration endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Request, status
from fastapi.responses import JSONResponse

from stackr_ai.exceptions import SettingsValidationError
from stackr_ai.providers import DISPATCHABLE_PROVIDERS
from stackr_ai.telemetry import get_logger

logger = get_logger(__name__)
router = APIRouter()

PROVIDER_LABELS = {
    "openai": "OpenAI",
    "anthropic": "Anthropic",
    "perplexity": "Perplexity",
}


@router.get("/settings", status_code=status.HTTP_200_OK)
async def get_ai_settings(request: Request) -> Dict[str, Any]:
    """Get current AI settings."""
    return request.app.state.settings_store.get().model_dump(mode="json")


@router.patch("/settings", status_code=status.HTTP_200_OK)
async def update_ai_settings(request: Request, changes: Dict[str, Any] = Body(...)):
    """Update AI settings; unspecified fields keep their value."""
    try:
        snapshot = request.app.state.settings_store.update(changes)
    except SettingsValidationError as e:
        logger.warning("ai_settings_rejected", error=e.message)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": e.message})

    return {
        "settings": snapshot.model_dump(mode="json"),
        "message": "AI settings updated successfully",
    }


@router.get("/status", status_code=status.HTTP_200_OK)
async def get_ai_status(request: Request) -> Dict[str, Dict[str, str]]:
    """Check reachability of each AI provider."""
    providers = request.app.state.providers
    result: Dict[str, Dict[str, str]] = {}

    for provider in DISPATCHABLE_PROVIDERS:
        implementation = providers.get(provider)
        if implementation is None:
            result[provider.value] = {
                "status": "unknown",
                "message": f"{PROVIDER_LABELS[provider.value]} API key not configured",
            }
            continue
        result[provider.value] = await implementation.health_check()

    return result


@router.delete("/cache", status_code=status.HTTP_200_OK)
async def clear_ai_cache(request: Request) -> Dict[str, int]:
    """Remove every cached AI result."""
    removed = await request.app.state.cache.clear()
    return {"removed": removed}
