"""FastAPI application factory and server entry point."""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stackr_ai import __version__
from stackr_ai.cache import CacheStore, FileCacheStore
from stackr_ai.config import Settings, get_settings
from stackr_ai.exceptions import StackrAIException
from stackr_ai.orchestrator import OrchestrationEngine
from stackr_ai.providers import AIProvider, BaseProvider, build_providers
from stackr_ai.server.middleware import RequestIdMiddleware
from stackr_ai.server.routes import ai_router
from stackr_ai.services import SettingsStore
from stackr_ai.telemetry import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    settings_store: Optional[SettingsStore] = None,
    cache: Optional[CacheStore] = None,
    providers: Optional[Mapping[AIProvider, BaseProvider]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    setup_logging(settings=settings)
    settings_store = settings_store or SettingsStore.from_settings(settings)
    providers = build_providers(settings) if providers is None else dict(providers)

    app = FastAPI(
        title=settings.app_name,
        description="Cached multi-provider orchestration for AI financial advice",
        version=__version__,
        redoc_url=None if settings.is_production else "/redoc",
    )

    app.state.settings_store = settings_store
    app.state.providers = providers
    app.state.cache = cache or FileCacheStore(settings.ai_cache_dir)
    # Shared with in-process callers; no admin route runs an orchestration
    app.state.engine = OrchestrationEngine(
        cache=app.state.cache,
        settings_store=settings_store,
        providers=providers,
    )

    @app.exception_handler(StackrAIException)
    async def stackr_exception_handler(request: Request, exc: StackrAIException):
        """Handle orchestration errors."""
        logger.error(
            "request_failed",
            error_code=exc.error_code,
            status_code=exc.status_code,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code or 500,
            content={
                "message": exc.message,
                "error_code": exc.error_code,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    app.add_middleware(RequestIdMiddleware)
    app.include_router(ai_router, prefix=settings.api_prefix, tags=["ai"])
    return app


def run_server(host: str = "0.0.0.0", port: int = 5002, reload: bool = False) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("stackr_ai.server.main:create_app", host=host, port=port, reload=reload, factory=True)
