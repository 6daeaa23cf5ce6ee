"""
Connection Store.

Persists Connection records and the Connection Set with a TTL.

Record and set writes are staged on one backend batch. Whether that batch
is atomic depends on the backend (see RedisBackend), so readers must
tolerate a set entry whose record is gone: list_all() may return such ids,
and get() reports them as absent.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Callable

from pydantic import ValidationError

from shared.config.logging import get_logger
from ws_gateway.components.core.constants import WSConstants
from ws_gateway.components.core.context import sanitize_log_data
from ws_gateway.components.storage.keys import KeyLayout
from ws_gateway.core.connection.models import Connection, utcnow

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager
    from ws_gateway.components.storage.backend import StoreBackend, WriteBatch

logger = get_logger(__name__)


class ConnectionStore:
    """
    Key-value persistence of connections.

    Responsibilities:
    - Upsert / fetch / remove Connection records
    - Keep the Connection Set in step with the records
    - Sweep records older than a maximum age
    """

    def __init__(
        self,
        backend: "StoreBackend",
        keys: KeyLayout | None = None,
        ttl: int = WSConstants.CONNECTION_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """
        Args:
            backend: Store backend (Redis or in-memory)
            keys: Key layout; defaults to the "websocket:" prefix
            ttl: Seconds every write keeps a key alive
            clock: Source of "now" for connect times and sweeps
        """
        self._backend = backend
        self._keys = keys or KeyLayout()
        self._ttl = ttl
        self._clock = clock

    @property
    def keys(self) -> KeyLayout:
        return self._keys

    @property
    def ttl(self) -> int:
        return self._ttl

    def now(self) -> datetime:
        return self._clock()

    def batch(self) -> "AbstractAsyncContextManager[WriteBatch]":
        """Open a write batch on the underlying backend."""
        return self._backend.batch()

    # =========================================================================
    # Staging helpers (shared with ChannelIndex)
    # =========================================================================

    def stage_put(self, batch: "WriteBatch", record: Connection, ttl: int | None = None) -> None:
        """Stage the record write and its Connection Set entry."""
        ttl = ttl or self._ttl
        batch.set(self._keys.connection(record.connection_id), record.model_dump_json(), ttl)
        batch.add_member(
            self._keys.connections(),
            record.connection_id,
            score=record.connected_at.timestamp(),
            ttl=ttl,
        )

    def stage_remove(
        self,
        batch: "WriteBatch",
        connection_id: str,
        record: Connection | None = None,
    ) -> None:
        """Stage deletion of the record, its set entry and its channel entries."""
        batch.delete(self._keys.connection(connection_id))
        batch.remove_member(self._keys.connections(), connection_id, self._ttl)
        if record is not None:
            for channel in record.channels:
                batch.remove_member(self._keys.channel(channel), connection_id, self._ttl)

    # =========================================================================
    # Operations
    # =========================================================================

    async def put(self, record: Connection, ttl: int | None = None) -> None:
        """Upsert a record and add its id to the Connection Set."""
        async with self.batch() as batch:
            self.stage_put(batch, record, ttl)

    async def get(self, connection_id: str) -> Connection | None:
        """Current record, or None when missing, expired or unreadable."""
        raw = await self._backend.get(self._keys.connection(connection_id))
        if raw is None:
            return None
        try:
            return Connection.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Unreadable connection record treated as absent",
                connection_id=sanitize_log_data(connection_id),
                error_count=e.error_count(),
            )
            return None

    async def exists(self, connection_id: str) -> bool:
        return await self._backend.exists(self._keys.connection(connection_id))

    async def remove(self, connection_id: str) -> None:
        """Remove a connection. Removing an absent id is not an error."""
        record = await self.get(connection_id)
        async with self.batch() as batch:
            self.stage_remove(batch, connection_id, record)

    async def list_all(self) -> list[str]:
        """Snapshot of the Connection Set, in connect order."""
        return await self._backend.members(self._keys.connections())

    async def channel_members(self, channel: str) -> list[str]:
        """Member set of a channel, in join order."""
        return await self._backend.members(self._keys.channel(channel))

    async def records(self, connection_ids: list[str] | None = None) -> list[Connection]:
        """Records of every id in the Connection Set (or of the given ids), skipping absent ones."""
        if connection_ids is None:
            connection_ids = await self.list_all()
        result = []
        for connection_id in connection_ids:
            record = await self.get(connection_id)
            if record is not None:
                result.append(record)
        return result

    async def sweep_stale(self, max_age_minutes: int = WSConstants.STALE_AFTER_MINUTES) -> int:
        """
        Remove connections whose record is gone or older than max_age_minutes.

        Returns:
            Number of connections removed.
        """
        now = self.now()
        removed = 0

        for connection_id in await self.list_all():
            record = await self.get(connection_id)
            if record is not None and record.age_minutes(now) <= max_age_minutes:
                continue

            async with self.batch() as batch:
                self.stage_remove(batch, connection_id, record)
            removed += 1

        if removed:
            logger.info(
                "Stale connections removed",
                removed=removed,
                max_age_minutes=max_age_minutes,
            )
        return removed
