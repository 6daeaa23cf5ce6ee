"""
Redis store backend.

Records are plain string keys with EX; the Connection Set and channel
member sets are sorted sets scored by insertion time, so listings come back
in connect/join order. Every member-set write refreshes the set's TTL.

Write batches are sent as one pipeline. With atomic=True the pipeline is
wrapped in MULTI/EXEC so a record and its index entries change together;
otherwise the commands are only batched and another client can observe a
partially applied batch.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from redis.exceptions import RedisError

from shared.config.logging import get_logger
from shared.utils.exceptions import StorageError

if TYPE_CHECKING:
    import redis.asyncio as redis
    from redis.asyncio.client import Pipeline

logger = get_logger(__name__)


class _RedisBatch:
    """WriteBatch staging commands on a redis pipeline."""

    def __init__(self, pipe: "Pipeline") -> None:
        self._pipe = pipe
        self.size = 0

    def set(self, key: str, value: str, ttl: int) -> None:
        self._pipe.set(key, value, ex=ttl)
        self.size += 1

    def delete(self, key: str) -> None:
        self._pipe.delete(key)
        self.size += 1

    def add_member(self, key: str, member: str, score: float, ttl: int) -> None:
        # NX keeps the first score, so order reflects the first insert
        self._pipe.zadd(key, {member: score}, nx=True)
        self._pipe.expire(key, ttl)
        self.size += 2

    def remove_member(self, key: str, member: str, ttl: int) -> None:
        self._pipe.zrem(key, member)
        # No-op when the set became empty and Redis dropped the key
        self._pipe.expire(key, ttl)
        self.size += 2


class RedisBackend:
    """StoreBackend over redis.asyncio."""

    def __init__(self, client: "redis.Redis", atomic: bool = False) -> None:
        self._client = client
        self._atomic = atomic

    @property
    def atomic(self) -> bool:
        """Whether write batches run inside MULTI/EXEC."""
        return self._atomic

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except RedisError as e:
            raise StorageError("get", key=key, error=str(e)) from e

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(key))
        except RedisError as e:
            raise StorageError("exists", key=key, error=str(e)) from e

    async def members(self, key: str) -> list[str]:
        try:
            return list(await self._client.zrange(key, 0, -1))
        except RedisError as e:
            raise StorageError("members", key=key, error=str(e)) from e

    @asynccontextmanager
    async def batch(self) -> AsyncIterator[_RedisBatch]:
        async with self._client.pipeline(transaction=self._atomic) as pipe:
            batch = _RedisBatch(pipe)
            yield batch
            if not batch.size:
                return
            try:
                await pipe.execute()
            except RedisError as e:
                raise StorageError(
                    "batch",
                    commands=batch.size,
                    atomic=self._atomic,
                    error=str(e),
                ) from e

    async def close(self) -> None:
        await self._client.aclose()
        logger.debug("Redis backend closed")
