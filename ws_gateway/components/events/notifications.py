"""
Notifications emitted by the registry.

Notifications tell the rest of the application that something happened to
a connection: it connected, sent a message, joined a channel. They are
fire-and-forget from the registry's point of view.

Notifiers:
- LocalNotifier: in-process listeners (default)
- RedisNotifier: publishes to a Redis pub/sub channel for other services
- NullNotifier: automatic notifications disabled

Usage:
    notifier = LocalNotifier()
    notifier.listen("websocket.message", on_message)
    await notifier.emit(Notification("websocket.message", {"connectionId": "abc"}))
"""

from __future__ import annotations

import inspect
import json
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol

from redis.exceptions import RedisError

from shared.config.logging import get_logger
from shared.utils.exceptions import StorageError
from ws_gateway.components.core.constants import NOTIFICATION_PREFIX

if TYPE_CHECKING:
    import redis.asyncio as redis

logger = get_logger(__name__)

Listener = Callable[["Notification"], Awaitable[None] | None]

# Listener key that receives every notification
WILDCARD = "*"


@dataclass(frozen=True, slots=True)
class Notification:
    """A named notification with a JSON-serializable payload."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    ts: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @classmethod
    def for_route(cls, route_key: str, payload: dict[str, Any]) -> "Notification":
        """Notification namespaced by a custom route key."""
        return cls(f"{NOTIFICATION_PREFIX}{route_key}", payload)

    def to_json(self) -> str:
        return json.dumps(
            {"name": self.name, "payload": self.payload, "ts": self.ts},
            default=str,
        )


class Notifier(Protocol):
    """Anything that can emit notifications."""

    async def emit(self, notification: Notification) -> None: ...


class NullNotifier:
    """Drops every notification."""

    async def emit(self, notification: Notification) -> None:
        return None


class LocalNotifier:
    """
    In-process notifier.

    Listeners may be plain functions or coroutine functions; they run in
    registration order. A failing listener propagates its exception to the
    emitter.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def listen(self, name: str, listener: Listener) -> None:
        """Register a listener for a notification name, or "*" for all."""
        self._listeners[name].append(listener)
        logger.debug("Notification listener registered", name=name)

    def forget(self, name: str) -> None:
        """Remove every listener registered for name."""
        self._listeners.pop(name, None)

    def has_listeners(self, name: str) -> bool:
        return bool(self._listeners.get(name) or self._listeners.get(WILDCARD))

    async def emit(self, notification: Notification) -> None:
        listeners = [
            *self._listeners.get(notification.name, ()),
            *self._listeners.get(WILDCARD, ()),
        ]
        for listener in listeners:
            result = listener(notification)
            if inspect.isawaitable(result):
                await result


class RedisNotifier:
    """Publishes notifications as JSON on a Redis pub/sub channel."""

    def __init__(self, client: "redis.Redis", channel: str) -> None:
        self._client = client
        self._channel = channel

    async def emit(self, notification: Notification) -> None:
        try:
            receivers = await self._client.publish(self._channel, notification.to_json())
        except RedisError as e:
            raise StorageError(
                "publish",
                channel=self._channel,
                notification=notification.name,
                error=str(e),
            ) from e
        logger.debug(
            "Notification published",
            channel=self._channel,
            notification=notification.name,
            receivers=receivers,
        )
