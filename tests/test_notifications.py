"""
Tests for notifications and the local notifier.
"""

import json

import pytest

from ws_gateway.components.events.notifications import (
    LocalNotifier,
    Notification,
    NullNotifier,
)


class TestNotification:
    def test_for_route_prefixes_name(self):
        assert Notification.for_route("myRoute", {}).name == "websocket.myRoute"

    def test_to_json(self):
        data = json.loads(Notification("websocket.message", {"a": 1}, ts="t").to_json())

        assert data == {"name": "websocket.message", "payload": {"a": 1}, "ts": "t"}


class TestLocalNotifier:
    """Listener registration and delivery."""

    @pytest.mark.asyncio
    async def test_sync_and_async_listeners(self):
        notifier = LocalNotifier()
        received = []

        async def async_listener(notification):
            received.append(("async", notification.name))

        notifier.listen("websocket.connected", lambda n: received.append(("sync", n.name)))
        notifier.listen("websocket.connected", async_listener)

        await notifier.emit(Notification("websocket.connected"))

        assert received == [
            ("sync", "websocket.connected"),
            ("async", "websocket.connected"),
        ]

    @pytest.mark.asyncio
    async def test_wildcard_receives_everything(self):
        notifier = LocalNotifier()
        received = []
        notifier.listen("*", lambda n: received.append(n.name))

        await notifier.emit(Notification("websocket.a"))
        await notifier.emit(Notification("websocket.b"))

        assert received == ["websocket.a", "websocket.b"]

    @pytest.mark.asyncio
    async def test_other_names_are_not_delivered(self):
        notifier = LocalNotifier()
        received = []
        notifier.listen("websocket.a", received.append)

        await notifier.emit(Notification("websocket.b"))

        assert received == []

    def test_forget_and_has_listeners(self):
        notifier = LocalNotifier()
        notifier.listen("websocket.a", lambda n: None)

        assert notifier.has_listeners("websocket.a")
        notifier.forget("websocket.a")
        assert not notifier.has_listeners("websocket.a")

    @pytest.mark.asyncio
    async def test_null_notifier_drops(self):
        assert await NullNotifier().emit(Notification("websocket.a")) is None
