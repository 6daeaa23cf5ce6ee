"""
WebSocket registry HTTP application.

Serves the management routes (status, connections, stats, broadcast, send)
for a long-running process. Lambda invocations use
ws_gateway.lambda_handler instead; both share the same store.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from shared.config.logging import get_logger, setup_logging
from shared.config.settings import Settings, get_settings
from ws_gateway.api.routes import router as websocket_router
from ws_gateway.components.core.dependencies import open_manager

if TYPE_CHECKING:
    from ws_gateway.components.events.notifications import Notifier
    from ws_gateway.components.storage.backend import StoreBackend
    from ws_gateway.components.transport.apigateway import Transport

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    transport: "Transport | None" = None,
    backend: "StoreBackend | None" = None,
    notifier: "Notifier | None" = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Components passed in replace the ones built from settings, which is how
    tests run the routes over the memory backend and a fake transport.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)
        for problem in settings.validate_production():
            logger.warning("Configuration problem", problem=problem)

        logger.info(
            "Starting WebSocket registry",
            env=settings.environment,
            store=settings.ws_store_driver,
        )
        async with open_manager(
            settings,
            transport=transport,
            backend=backend,
            notifier=notifier,
        ) as manager:
            app.state.manager = manager
            yield
        logger.info("WebSocket registry stopped")

    app = FastAPI(
        title="WebSocket Registry",
        description="Connection registry and fan-out for API Gateway WebSocket APIs",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(websocket_router)

    @app.get("/health")
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "service": "ws-registry",
            "version": app.version,
            "environment": settings.environment,
        }

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("ws_gateway.main:create_app", factory=True, host="0.0.0.0", port=8001)
