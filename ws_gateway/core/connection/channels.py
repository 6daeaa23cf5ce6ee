"""
Channel Index.

Bidirectional channel membership:
- channel member set at {prefix}channel:{name} lists connection ids
- Connection.channels lists channel names

Both directions are written in the same backend batch on every join and
leave. Channel member sets are never read back to decide membership of a
connection; the record is the source of truth for channels_of().
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared.config.logging import get_logger
from ws_gateway.components.core.constants import NotificationName
from ws_gateway.components.core.context import sanitize_log_data
from ws_gateway.components.events.notifications import Notification, NullNotifier

if TYPE_CHECKING:
    from ws_gateway.components.events.notifications import Notifier
    from ws_gateway.core.connection.store import ConnectionStore

logger = get_logger(__name__)


class ChannelIndex:
    """Joins, leaves and membership queries for channels."""

    def __init__(self, store: "ConnectionStore", notifier: "Notifier | None" = None) -> None:
        self._store = store
        self._notifier = notifier or NullNotifier()

    async def join(self, connection_id: str, channel: str) -> bool:
        """
        Add a connection to a channel.

        Returns False when the connection does not exist. Joining twice is
        harmless for membership, but notifies both times.
        """
        record = await self._store.get(connection_id)
        if record is None:
            return False

        if channel not in record.channels:
            record.channels.append(channel)

        async with self._store.batch() as batch:
            self._store.stage_put(batch, record)
            batch.add_member(
                self._store.keys.channel(channel),
                connection_id,
                score=self._store.now().timestamp(),
                ttl=self._store.ttl,
            )

        logger.debug(
            "Connection joined channel",
            connection_id=sanitize_log_data(connection_id),
            channel=sanitize_log_data(channel),
        )
        await self._notifier.emit(
            Notification(
                NotificationName.CHANNEL_JOINED.value,
                {"connectionId": connection_id, "channel": channel},
            )
        )
        return True

    async def leave(self, connection_id: str, channel: str) -> bool:
        """
        Remove a connection from a channel.

        Returns False when the connection does not exist; leaving a channel
        the connection is not in is a no-op that still returns True.
        """
        record = await self._store.get(connection_id)
        if record is None:
            return False

        record.channels = [ch for ch in record.channels if ch != channel]

        async with self._store.batch() as batch:
            self._store.stage_put(batch, record)
            batch.remove_member(self._store.keys.channel(channel), connection_id, self._store.ttl)

        logger.debug(
            "Connection left channel",
            connection_id=sanitize_log_data(connection_id),
            channel=sanitize_log_data(channel),
        )
        await self._notifier.emit(
            Notification(
                NotificationName.CHANNEL_LEFT.value,
                {"connectionId": connection_id, "channel": channel},
            )
        )
        return True

    async def members_of(self, channel: str) -> list[str]:
        """Connection ids in a channel, in join order."""
        return await self._store.channel_members(channel)

    async def channels_of(self, connection_id: str) -> list[str]:
        """Channels of a connection, in join order; empty when it is absent."""
        record = await self._store.get(connection_id)
        if record is None:
            return []
        return list(record.channels)

    async def all_channels(self) -> set[str]:
        """Union of the channels of every live connection."""
        channels: set[str] = set()
        for record in await self._store.records():
            channels.update(record.channels)
        return channels
