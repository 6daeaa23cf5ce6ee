"""
Store backends for connection state.

A backend offers string values and score-ordered member sets, both with a
TTL. Reads are individual calls; writes are staged on a WriteBatch and sent
together when the batch context exits, so a backend can decide whether the
batch is atomic.

Usage:
    backend = MemoryBackend()
    async with backend.batch() as batch:
        batch.set("k", "v", ttl=60)
        batch.add_member("s", "k", score=time.time(), ttl=60)
"""

from __future__ import annotations

import time
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Protocol


class WriteBatch(Protocol):
    """Write operations staged for one round-trip."""

    def set(self, key: str, value: str, ttl: int) -> None: ...

    def delete(self, key: str) -> None: ...

    def add_member(self, key: str, member: str, score: float, ttl: int) -> None:
        """Add member to the set at key. An existing member keeps its score."""
        ...

    def remove_member(self, key: str, member: str, ttl: int) -> None: ...


class StoreBackend(Protocol):
    """Key-value persistence used by ConnectionStore and ChannelIndex."""

    async def get(self, key: str) -> str | None: ...

    async def exists(self, key: str) -> bool: ...

    async def members(self, key: str) -> list[str]:
        """Members of the set at key, ordered by score."""
        ...

    def batch(self) -> AbstractAsyncContextManager[WriteBatch]: ...

    async def close(self) -> None: ...


# =============================================================================
# In-memory backend
# =============================================================================


@dataclass
class _Entry:
    value: object
    expires_at: float


@dataclass
class _MemoryBatch:
    """Collects operations and applies them in order on commit."""

    ops: list[tuple] = field(default_factory=list)

    def set(self, key: str, value: str, ttl: int) -> None:
        self.ops.append(("set", key, value, ttl))

    def delete(self, key: str) -> None:
        self.ops.append(("delete", key))

    def add_member(self, key: str, member: str, score: float, ttl: int) -> None:
        self.ops.append(("add_member", key, member, score, ttl))

    def remove_member(self, key: str, member: str, ttl: int) -> None:
        self.ops.append(("remove_member", key, member, ttl))


class MemoryBackend:
    """
    Process-local backend with TTL expiry.

    Used for tests and single-process runs (the "memory" store driver).
    Expiry is evaluated lazily against the injected clock, so tests can move
    time forward without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, _Entry] = {}

    def _live(self, key: str) -> _Entry | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    async def get(self, key: str) -> str | None:
        entry = self._live(key)
        if entry is None or not isinstance(entry.value, str):
            return None
        return entry.value

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def members(self, key: str) -> list[str]:
        entry = self._live(key)
        if entry is None or not isinstance(entry.value, dict):
            return []
        return [m for m, _ in sorted(entry.value.items(), key=lambda item: item[1])]

    @asynccontextmanager
    async def batch(self) -> AsyncIterator[_MemoryBatch]:
        batch = _MemoryBatch()
        yield batch
        for op in batch.ops:
            self._apply(op)

    def _apply(self, op: tuple) -> None:
        name, key = op[0], op[1]
        now = self._clock()

        if name == "set":
            _, _, value, ttl = op
            self._data[key] = _Entry(value, now + ttl)
        elif name == "delete":
            self._data.pop(key, None)
        elif name == "add_member":
            _, _, member, score, ttl = op
            entry = self._live(key)
            members = entry.value if entry and isinstance(entry.value, dict) else {}
            members.setdefault(member, score)
            self._data[key] = _Entry(members, now + ttl)
        elif name == "remove_member":
            _, _, member, ttl = op
            entry = self._live(key)
            if entry is None or not isinstance(entry.value, dict):
                return
            entry.value.pop(member, None)
            if entry.value:
                entry.expires_at = now + ttl
            else:
                # Redis drops empty sets; do the same
                del self._data[key]

    async def close(self) -> None:
        """Nothing to release; data lives as long as the backend object."""
