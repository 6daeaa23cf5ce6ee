"""
Event handling components.

Lifecycle event variants, body decoding, and notifications.
"""

from ws_gateway.components.events.types import (
    Connect,
    Custom,
    Default,
    Disconnect,
    LifecycleEvent,
    decode_body,
    parse_event,
)
from ws_gateway.components.events.notifications import (
    LocalNotifier,
    Notification,
    Notifier,
    NullNotifier,
    RedisNotifier,
)

__all__ = [
    # Lifecycle events
    "Connect",
    "Custom",
    "Default",
    "Disconnect",
    "LifecycleEvent",
    "decode_body",
    "parse_event",
    # Notifications
    "LocalNotifier",
    "Notification",
    "Notifier",
    "NullNotifier",
    "RedisNotifier",
]
