"""
WebSocket Connection Manager.

Thin facade composing the connection components behind one interface for
external callers (Lambda handler, HTTP routes, CLI, schedulers):
- ConnectionStore: records and the Connection Set
- ChannelIndex: channel membership
- Dispatcher: lifecycle events
- Fanout: delivery

The manager holds references only; all state lives in the store, so any
number of managers (one per invocation) can share it.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from shared.config.logging import get_logger
from shared.utils.exceptions import TransportGone
from ws_gateway.components.core.constants import WSConstants
from ws_gateway.components.core.context import sanitize_log_data
from ws_gateway.components.events.notifications import NullNotifier
from ws_gateway.core.connection import (
    ChannelIndex,
    ConnectionStore,
    Dispatcher,
    Fanout,
)

if TYPE_CHECKING:
    from ws_gateway.components.events.notifications import Notifier
    from ws_gateway.components.storage.backend import StoreBackend
    from ws_gateway.components.storage.keys import KeyLayout
    from ws_gateway.components.transport.apigateway import Transport
    from ws_gateway.core.connection.models import Connection

logger = get_logger(__name__)

__all__ = ["ConnectionManager"]


class ConnectionManager:
    """Read and write API over connections, channels and delivery."""

    def __init__(
        self,
        store: ConnectionStore,
        channels: ChannelIndex,
        dispatcher: Dispatcher,
        fanout: Fanout,
        stale_after_minutes: int = WSConstants.STALE_AFTER_MINUTES,
    ) -> None:
        self._store = store
        self._channels = channels
        self._dispatcher = dispatcher
        self._fanout = fanout
        self._stale_after_minutes = stale_after_minutes

    @classmethod
    def create(
        cls,
        backend: "StoreBackend",
        transport: "Transport",
        notifier: "Notifier | None" = None,
        keys: "KeyLayout | None" = None,
        ttl: int = WSConstants.CONNECTION_TTL,
        stale_after_minutes: int = WSConstants.STALE_AFTER_MINUTES,
        batch_size: int = WSConstants.FANOUT_BATCH_SIZE,
        **store_kwargs: Any,
    ) -> "ConnectionManager":
        """Wire the components over one backend."""
        notifier = notifier or NullNotifier()
        store = ConnectionStore(backend, keys=keys, ttl=ttl, **store_kwargs)
        return cls(
            store=store,
            channels=ChannelIndex(store, notifier),
            dispatcher=Dispatcher(store, notifier),
            fanout=Fanout(store, transport, batch_size=batch_size),
            stale_after_minutes=stale_after_minutes,
        )

    @property
    def store(self) -> ConnectionStore:
        return self._store

    # =========================================================================
    # Delivery
    # =========================================================================

    async def send_to_connection(self, connection_id: str, data: Any) -> bool:
        return await self._fanout.send_one(connection_id, data)

    async def send_to_connections(self, connection_ids: Iterable[str], data: Any) -> dict[str, bool]:
        return await self._fanout.send_many(connection_ids, data)

    async def broadcast(self, data: Any) -> dict[str, bool]:
        return await self._fanout.broadcast(data)

    async def send_to_user(self, user_id: int, data: Any) -> dict[str, bool]:
        """Send to every connection of one user."""
        connections = await self.get_connections_by_user_id(user_id)
        return await self.send_to_connections(connections, data)

    async def send_to_users(self, user_ids: Iterable[int], data: Any) -> dict[int, dict[str, bool]]:
        """Send to several users; results are keyed by user id."""
        results: dict[int, dict[str, bool]] = {}
        for user_id in user_ids:
            results[user_id] = await self.send_to_user(user_id, data)
        return results

    async def send_to_channel(self, channel: str, data: Any) -> dict[str, bool]:
        connections = await self.get_connections_by_channel(channel)
        return await self.send_to_connections(connections, data)

    async def disconnect(self, connection_id: str) -> None:
        """
        Close a client at the gateway and forget it.

        The record is removed even if the gateway reports the connection
        already gone.
        """
        try:
            await self._fanout.transport.delete(connection_id)
        except TransportGone:
            logger.debug(
                "Connection already gone at the gateway",
                connection_id=sanitize_log_data(connection_id),
            )
        await self._store.remove(connection_id)

    # =========================================================================
    # Channels
    # =========================================================================

    async def join_channel(self, connection_id: str, channel: str) -> bool:
        return await self._channels.join(connection_id, channel)

    async def leave_channel(self, connection_id: str, channel: str) -> bool:
        return await self._channels.leave(connection_id, channel)

    async def get_connections_by_channel(self, channel: str) -> list[str]:
        return await self._channels.members_of(channel)

    async def get_channels_by_connection(self, connection_id: str) -> list[str]:
        return await self._channels.channels_of(connection_id)

    async def get_all_channels(self) -> set[str]:
        return await self._channels.all_channels()

    # =========================================================================
    # Connections
    # =========================================================================

    async def get_connections_by_user_id(self, user_id: int) -> list[str]:
        """Live connection ids of a user, in connect order."""
        return [
            record.connection_id
            for record in await self._store.records()
            if record.user_id == user_id
        ]

    async def get_connection(self, connection_id: str) -> "Connection | None":
        return await self._store.get(connection_id)

    async def connection_exists(self, connection_id: str) -> bool:
        return await self._store.exists(connection_id)

    async def get_all_connections(self) -> list[str]:
        return await self._store.list_all()

    async def get_stats(self) -> dict[str, Any]:
        """
        Connection statistics from a fresh snapshot.

        Every figure counts live records only; Connection Set entries whose
        record has expired are left out.
        """
        records = await self._store.records()
        per_channel: Counter[str] = Counter()
        for record in records:
            per_channel.update(record.channels)

        return {
            "total_connections": len(records),
            "total_channels": len(per_channel),
            "per_channel_member_count": dict(per_channel),
        }

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def handle(self, event: Mapping[str, Any]) -> dict[str, Any]:
        """Handle an API Gateway lifecycle event; always returns a response."""
        return await self._dispatcher.handle(event)

    async def cleanup(self, max_age_minutes: int | None = None) -> int:
        """Sweep stale connections; returns how many were removed."""
        if max_age_minutes is None:
            max_age_minutes = self._stale_after_minutes
        return await self._store.sweep_stale(max_age_minutes)
