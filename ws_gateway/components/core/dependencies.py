"""
Component wiring for the WebSocket registry.

Builds the store backend, notifier and transport from settings and hands
out a ConnectionManager. Nothing is cached at module level: every
entrypoint opens its own manager and closes it when done.

Usage:
    async with open_manager(settings) as manager:
        await manager.broadcast({"message": "hello"})

FastAPI:
    @router.get("/stats")
    async def stats(manager: ConnectionManager = Depends(get_manager)): ...
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from fastapi import Request

from shared.config.logging import get_logger
from shared.infrastructure.redis_client import close_redis_client, create_redis_client
from shared.utils.exceptions import ConfigurationError
from ws_gateway.components.events.notifications import (
    LocalNotifier,
    NullNotifier,
    RedisNotifier,
)
from ws_gateway.components.storage.backend import MemoryBackend
from ws_gateway.components.storage.keys import KeyLayout
from ws_gateway.components.storage.redis_backend import RedisBackend
from ws_gateway.components.transport.apigateway import ApiGatewayTransport
from ws_gateway.connection_manager import ConnectionManager

if TYPE_CHECKING:
    import redis.asyncio as redis
    from shared.config.settings import Settings
    from ws_gateway.components.events.notifications import Notifier
    from ws_gateway.components.storage.backend import StoreBackend
    from ws_gateway.components.transport.apigateway import Transport

logger = get_logger(__name__)


def create_store_backend(
    settings: "Settings",
    redis_client: "redis.Redis | None" = None,
) -> "StoreBackend":
    """Backend for the configured store driver."""
    if settings.ws_store_driver == "memory":
        return MemoryBackend()
    if settings.ws_store_driver == "redis":
        if redis_client is None:
            raise ConfigurationError("The redis store driver needs a Redis client")
        return RedisBackend(redis_client, atomic=settings.ws_consistency == "atomic")
    raise ConfigurationError(f"Unknown store driver: {settings.ws_store_driver}")


def create_notifier(
    settings: "Settings",
    redis_client: "redis.Redis | None" = None,
) -> "Notifier":
    """Notifier for the configured notification driver."""
    if not settings.ws_notifications_enabled:
        return NullNotifier()
    if settings.ws_notification_driver == "redis":
        if redis_client is None:
            raise ConfigurationError("The redis notification driver needs a Redis client")
        return RedisNotifier(redis_client, settings.ws_notification_channel)
    return LocalNotifier()


def _needs_redis(settings: "Settings") -> bool:
    return settings.ws_store_driver == "redis" or (
        settings.ws_notifications_enabled and settings.ws_notification_driver == "redis"
    )


def build_manager(
    settings: "Settings",
    backend: "StoreBackend",
    notifier: "Notifier",
    transport: "Transport",
) -> ConnectionManager:
    """Wire a ConnectionManager from already built components."""
    return ConnectionManager.create(
        backend=backend,
        transport=transport,
        notifier=notifier,
        keys=KeyLayout(settings.ws_key_prefix),
        ttl=settings.ws_connection_ttl,
        stale_after_minutes=settings.ws_stale_after_minutes,
        batch_size=settings.ws_fanout_batch_size,
    )


@asynccontextmanager
async def open_manager(
    settings: "Settings",
    transport: "Transport | None" = None,
    backend: "StoreBackend | None" = None,
    notifier: "Notifier | None" = None,
) -> AsyncIterator[ConnectionManager]:
    """
    Open a ConnectionManager for the duration of the block.

    Components passed in are used as-is; the rest are built from settings.
    A Redis client created here is closed on exit.
    """
    redis_client = None
    if (backend is None or notifier is None) and _needs_redis(settings):
        redis_client = create_redis_client(settings)

    try:
        if backend is None:
            backend = create_store_backend(settings, redis_client)
        if notifier is None:
            notifier = create_notifier(settings, redis_client)
        if transport is None:
            transport = ApiGatewayTransport.from_settings(settings)
        logger.debug(
            "Connection manager opened",
            store=type(backend).__name__,
            notifier=type(notifier).__name__,
        )
        yield build_manager(settings, backend, notifier, transport)
    finally:
        await close_redis_client(redis_client)


def get_manager(request: Request) -> ConnectionManager:
    """FastAPI dependency: the manager opened by the application lifespan."""
    return request.app.state.manager
