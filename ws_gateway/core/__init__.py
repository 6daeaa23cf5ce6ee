"""
WebSocket Registry Core Module.

- connection/: store, channel index, dispatcher, fan-out
"""

from ws_gateway.core.connection import (
    Connection,
    ConnectionStore,
    ChannelIndex,
    Dispatcher,
    Fanout,
)

__all__ = [
    "Connection",
    "ConnectionStore",
    "ChannelIndex",
    "Dispatcher",
    "Fanout",
]
