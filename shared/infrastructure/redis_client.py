"""
Redis Client Management.

Clients are created per entrypoint and handed to the components that need
them. An asyncio Redis client is bound to the event loop it first ran on,
so each Lambda invocation builds and closes its own client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import redis.asyncio as redis

from shared.config.logging import get_logger

if TYPE_CHECKING:
    from shared.config.settings import Settings

logger = get_logger(__name__)


def create_redis_client(settings: "Settings") -> redis.Redis:
    """Create an async Redis client backed by its own connection pool."""
    client = redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_pool_max_connections,
        decode_responses=True,
        socket_connect_timeout=settings.redis_socket_timeout,
        socket_timeout=settings.redis_socket_timeout,
        health_check_interval=30,
    )
    logger.debug(
        "Redis client created",
        max_connections=settings.redis_pool_max_connections,
        timeout=settings.redis_socket_timeout,
    )
    return client


async def close_redis_client(client: redis.Redis | None) -> None:
    """Close a client created by create_redis_client."""
    if client is None:
        return
    try:
        await client.aclose()
        logger.debug("Redis client closed")
    except Exception as e:
        logger.warning("Error closing Redis client", error=str(e))
