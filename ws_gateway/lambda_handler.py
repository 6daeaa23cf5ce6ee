"""
AWS Lambda entrypoint for the WebSocket API routes.

Point $connect, $disconnect, $default and any custom route integrations at
ws_gateway.lambda_handler.handler. Every invocation opens its own manager;
all connection state lives in the store.

The management endpoint is taken from WS_API_GATEWAY_ENDPOINT when set,
otherwise derived from the event's domainName and stage.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

from shared.config.logging import get_logger, request_id_var, setup_logging
from shared.config.settings import Settings, get_settings
from ws_gateway.components.core.constants import ResponseStatus
from ws_gateway.components.core.dependencies import open_manager
from ws_gateway.core.connection.dispatcher import make_response

logger = get_logger(__name__)


def resolve_endpoint(settings: Settings, event: Mapping[str, Any]) -> Settings:
    """Settings with the management endpoint filled in from the event if missing."""
    if settings.ws_api_gateway_endpoint:
        return settings

    context = event.get("requestContext") or {}
    domain = context.get("domainName")
    stage = context.get("stage")
    if not domain or not stage:
        return settings

    return settings.model_copy(
        update={"ws_api_gateway_endpoint": f"https://{domain}/{stage}"}
    )


async def handle_event(event: Mapping[str, Any], settings: Settings) -> dict[str, Any]:
    """Open a manager for one event and dispatch it."""
    try:
        async with open_manager(resolve_endpoint(settings, event)) as manager:
            return await manager.handle(event)
    except Exception as e:
        logger.error("Failed to handle WebSocket event", error=str(e), exc_info=True)
        return make_response(
            ResponseStatus.INTERNAL_ERROR,
            {"error": "Internal server error"},
        )


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """Lambda handler. Always returns an API Gateway response."""
    try:
        settings = get_settings()
        setup_logging(settings)
    except Exception as e:
        # Logging may not be configured at this point
        logger.error("Invalid WebSocket registry configuration", error=str(e), exc_info=True)
        return make_response(
            ResponseStatus.INTERNAL_ERROR,
            {"error": "Internal server error"},
        )

    request_context = event.get("requestContext") or {}
    token = request_id_var.set(str(request_context.get("requestId") or ""))
    try:
        return asyncio.run(handle_event(event, settings))
    finally:
        request_id_var.reset(token)
