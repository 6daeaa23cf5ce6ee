"""
Core WebSocket registry components: constants and log sanitizing.
"""

from ws_gateway.components.core.constants import (
    NOTIFICATION_PREFIX,
    NotificationName,
    ResponseStatus,
    RouteKey,
    WSConstants,
)
from ws_gateway.components.core.context import event_log_fields, sanitize_log_data

__all__ = [
    # Constants
    "NOTIFICATION_PREFIX",
    "NotificationName",
    "ResponseStatus",
    "RouteKey",
    "WSConstants",
    # Context
    "event_log_fields",
    "sanitize_log_data",
]
