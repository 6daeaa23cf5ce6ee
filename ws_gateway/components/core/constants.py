"""
WebSocket Registry Constants.

Centralized constants with documentation explaining the value of each.
Values marked configurable have a settings counterpart that wins at runtime.
"""

from enum import IntEnum, StrEnum
from typing import Final

__all__ = [
    "RouteKey",
    "ResponseStatus",
    "NotificationName",
    "WSConstants",
    "NOTIFICATION_PREFIX",
]


class RouteKey(StrEnum):
    """
    Reserved API Gateway route keys.

    Any other value is a custom route selected by the route selection
    expression of the WebSocket API.
    """

    CONNECT = "$connect"
    DISCONNECT = "$disconnect"
    DEFAULT = "$default"


class ResponseStatus(IntEnum):
    """Status codes returned to API Gateway for a lifecycle event."""

    OK = 200
    INTERNAL_ERROR = 500


# Every notification name starts with this namespace
NOTIFICATION_PREFIX: Final[str] = "websocket."


class NotificationName(StrEnum):
    """Fixed notification names. Custom routes use NOTIFICATION_PREFIX + route key."""

    CONNECTED = "websocket.connected"
    DISCONNECTED = "websocket.disconnected"
    MESSAGE = "websocket.message"
    CHANNEL_JOINED = "websocket.channel.joined"
    CHANNEL_LEFT = "websocket.channel.left"


class WSConstants:
    """
    Operational defaults.

    Configurable via settings.py:
    - CONNECTION_TTL -> settings.ws_connection_ttl
    - STALE_AFTER_MINUTES -> settings.ws_stale_after_minutes
    - KEY_PREFIX -> settings.ws_key_prefix
    - FANOUT_BATCH_SIZE -> settings.ws_fanout_batch_size
    """

    # CONNECTION_TTL: one day
    # API Gateway closes idle connections after 10 minutes and any connection
    # after 2 hours, so a day-old record is always orphaned.
    CONNECTION_TTL: Final[int] = 86400

    # STALE_AFTER_MINUTES: matches CONNECTION_TTL so the sweep only removes
    # what expiry would eventually remove anyway
    STALE_AFTER_MINUTES: Final[int] = 1440

    KEY_PREFIX: Final[str] = "websocket:"

    # FANOUT_BATCH_SIZE: concurrent post_to_connection calls per batch
    FANOUT_BATCH_SIZE: Final[int] = 50

    # MAX_LOGGED_ROUTE_KEY: route keys are client controlled
    MAX_LOGGED_ROUTE_KEY: Final[int] = 128
