"""
Storage components: key layout and store backends.

Usage:
    from ws_gateway.components.storage import KeyLayout, MemoryBackend, RedisBackend
"""

from ws_gateway.components.storage.keys import KeyLayout
from ws_gateway.components.storage.backend import (
    MemoryBackend,
    StoreBackend,
    WriteBatch,
)
from ws_gateway.components.storage.redis_backend import RedisBackend

__all__ = [
    "KeyLayout",
    "MemoryBackend",
    "RedisBackend",
    "StoreBackend",
    "WriteBatch",
]
