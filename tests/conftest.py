"""
Pytest configuration and fixtures for the WebSocket registry tests.

Everything runs over the in-memory backend with a controllable clock, a
fake transport and a notifier that records what was emitted.
"""

from datetime import datetime, timedelta, timezone

import pytest

from shared.config.settings import Settings
from shared.utils.exceptions import TransportError, TransportGone
from ws_gateway.components.events.notifications import LocalNotifier, Notification
from ws_gateway.components.storage.backend import MemoryBackend
from ws_gateway.connection_manager import ConnectionManager
from ws_gateway.core.connection.store import ConnectionStore


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def time(self) -> float:
        return self.current.timestamp()

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FakeTransport:
    """
    Transport double.

    Ids in `gone` raise TransportGone, ids in `failing` raise TransportError;
    everything else is recorded as delivered.
    """

    def __init__(self):
        self.sent: list[tuple[str, bytes]] = []
        self.deleted: list[str] = []
        self.gone: set[str] = set()
        self.failing: set[str] = set()

    async def post(self, connection_id: str, data: bytes) -> None:
        if connection_id in self.gone:
            raise TransportGone(connection_id)
        if connection_id in self.failing:
            raise TransportError(connection_id, code="LimitExceededException")
        self.sent.append((connection_id, data))

    async def delete(self, connection_id: str) -> None:
        if connection_id in self.gone:
            raise TransportGone(connection_id)
        self.deleted.append(connection_id)

    def recipients(self) -> list[str]:
        return [connection_id for connection_id, _ in self.sent]


class RecordingNotifier(LocalNotifier):
    """LocalNotifier that keeps every notification it emits."""

    def __init__(self):
        super().__init__()
        self.notifications: list[Notification] = []
        self.listen("*", self.notifications.append)

    def names(self) -> list[str]:
        return [n.name for n in self.notifications]

    def named(self, name: str) -> list[Notification]:
        return [n for n in self.notifications if n.name == name]


def lifecycle_event(
    connection_id: str,
    route_key: str,
    body=None,
    user_id=None,
) -> dict:
    """API Gateway WebSocket event as delivered to the integration."""
    context: dict = {"connectionId": connection_id, "routeKey": route_key}
    if user_id is not None:
        context["authorizer"] = {"userId": user_id}
    event: dict = {"requestContext": context}
    if body is not None:
        event["body"] = body
    return event


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend(clock):
    return MemoryBackend(clock=clock.time)


@pytest.fixture
def store(backend, clock):
    return ConnectionStore(backend, clock=clock.now)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def manager(backend, transport, notifier, clock):
    return ConnectionManager.create(
        backend=backend,
        transport=transport,
        notifier=notifier,
        clock=clock.now,
    )


@pytest.fixture
def settings():
    """Settings for an isolated, memory-backed registry."""
    return Settings(
        _env_file=None,
        ws_store_driver="memory",
        ws_notification_driver="local",
        ws_api_gateway_endpoint="https://abc123.execute-api.us-east-1.amazonaws.com/prod",
        log_enabled=False,
    )
