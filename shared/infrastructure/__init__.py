"""
Infrastructure module: Redis client construction and teardown.
"""

from shared.infrastructure.redis_client import (
    create_redis_client,
    close_redis_client,
)

__all__ = [
    "create_redis_client",
    "close_redis_client",
]
