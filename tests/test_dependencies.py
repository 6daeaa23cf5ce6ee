"""
Tests for component wiring from settings.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from shared.utils.exceptions import ConfigurationError
from ws_gateway.components.core import dependencies
from ws_gateway.components.events.notifications import (
    LocalNotifier,
    NullNotifier,
    RedisNotifier,
)
from ws_gateway.components.storage.backend import MemoryBackend
from ws_gateway.components.storage.redis_backend import RedisBackend


class TestFactories:
    """Drivers selected by settings."""

    def test_memory_store_driver(self, settings):
        assert isinstance(dependencies.create_store_backend(settings), MemoryBackend)

    def test_redis_store_driver_needs_client(self, settings):
        settings = settings.model_copy(update={"ws_store_driver": "redis"})

        with pytest.raises(ConfigurationError):
            dependencies.create_store_backend(settings)

    def test_atomic_consistency(self, settings):
        settings = settings.model_copy(
            update={"ws_store_driver": "redis", "ws_consistency": "atomic"}
        )

        backend = dependencies.create_store_backend(settings, MagicMock())

        assert isinstance(backend, RedisBackend)
        assert backend.atomic is True

    def test_notifier_drivers(self, settings):
        assert isinstance(dependencies.create_notifier(settings), LocalNotifier)

        disabled = settings.model_copy(update={"ws_notifications_enabled": False})
        assert isinstance(dependencies.create_notifier(disabled), NullNotifier)

        redis_driver = settings.model_copy(update={"ws_notification_driver": "redis"})
        assert isinstance(dependencies.create_notifier(redis_driver, MagicMock()), RedisNotifier)


class TestOpenManager:
    """Manager lifetime."""

    @pytest.mark.asyncio
    async def test_memory_manager_needs_no_redis(self, settings, transport):
        with patch.object(dependencies, "create_redis_client") as create_client:
            async with dependencies.open_manager(settings, transport=transport) as manager:
                assert await manager.get_all_connections() == []

        create_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_redis_client_is_closed_on_exit(self, settings, transport):
        settings = settings.model_copy(update={"ws_store_driver": "redis"})
        client = MagicMock()
        client.aclose = AsyncMock()

        with patch.object(dependencies, "create_redis_client", return_value=client):
            async with dependencies.open_manager(settings, transport=transport):
                pass

        client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_settings_are_applied(self, settings, transport, notifier):
        settings = settings.model_copy(update={"ws_key_prefix": "app:ws:", "ws_connection_ttl": 120})
        backend = MemoryBackend()

        async with dependencies.open_manager(
            settings, transport=transport, backend=backend, notifier=notifier
        ) as manager:
            assert manager.store.keys.prefix == "app:ws:"
            assert manager.store.ttl == 120
