"""
Tests for the HTTP management routes.

The app runs over the memory backend and a fake transport injected through
create_app().
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from ws_gateway.core.connection.models import Connection
from ws_gateway.core.connection.store import ConnectionStore
from ws_gateway.main import create_app


@pytest.fixture
def client(settings, backend, transport, clock):
    """Test client with two open connections, A and B."""

    async def seed():
        store = ConnectionStore(backend, clock=clock.now)
        for connection_id in ["A", "B"]:
            await store.put(
                Connection(connection_id=connection_id, connected_at=clock.now(), channels=["news"])
            )
            clock.advance(seconds=1)

    asyncio.run(seed())
    app = create_app(settings, transport=transport, backend=backend)
    with TestClient(app) as test_client:
        yield test_client


class TestReadRoutes:
    """GET routes."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_status(self, client):
        response = client.get("/websocket/status")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "running"
        assert data["connections"] == ["A", "B"]
        assert "timestamp" in data

    def test_connections(self, client):
        response = client.get("/websocket/connections")

        assert response.json() == {"connections": ["A", "B"], "count": 2}

    def test_stats(self, client):
        response = client.get("/websocket/stats")

        assert response.json() == {
            "total_connections": 2,
            "total_channels": 1,
            "per_channel_member_count": {"news": 2},
        }


class TestWriteRoutes:
    """POST routes."""

    def test_broadcast(self, client, transport):
        response = client.post("/websocket/broadcast", json={"message": "hello", "type": "notice"})

        assert response.status_code == 200
        assert response.json() == {"message": "Broadcast sent", "result": {"A": True, "B": True}}
        assert sorted(transport.recipients()) == ["A", "B"]

    def test_broadcast_requires_message(self, client):
        response = client.post("/websocket/broadcast", json={"type": "notice"})

        assert response.status_code == 422

    def test_send(self, client, transport):
        response = client.post("/websocket/send/A", json={"message": "hi"})

        assert response.json() == {"message": "Message sent", "success": True}
        assert transport.recipients() == ["A"]

    def test_send_to_gone_connection(self, client, transport):
        transport.gone.add("B")

        response = client.post("/websocket/send/B", json={"message": "hi"})

        assert response.json() == {"message": "Failed to send message", "success": False}
        assert client.get("/websocket/connections").json()["count"] == 1
