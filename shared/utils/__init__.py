"""
Utilities module: Exceptions.
"""

from shared.utils.exceptions import (
    WebSocketError,
    StorageError,
    TransportError,
    TransportGone,
    HandlerError,
    ConfigurationError,
)

__all__ = [
    "WebSocketError",
    "StorageError",
    "TransportError",
    "TransportGone",
    "HandlerError",
    "ConfigurationError",
]
