"""
WebSocket Registry Components.

Organized into domain-specific modules:
- core/       - Foundational components (constants, log sanitizing, wiring)
- storage/    - Key layout and store backends (Redis, in-memory)
- events/     - Lifecycle event variants and notifications
- transport/  - API Gateway Management API delivery

New code should import from specific submodules for clarity.
"""

# =============================================================================
# Core Components
# =============================================================================
from ws_gateway.components.core.constants import (
    NOTIFICATION_PREFIX,
    NotificationName,
    ResponseStatus,
    RouteKey,
    WSConstants,
)
from ws_gateway.components.core.context import sanitize_log_data

# =============================================================================
# Storage
# =============================================================================
from ws_gateway.components.storage import (
    KeyLayout,
    MemoryBackend,
    RedisBackend,
    StoreBackend,
    WriteBatch,
)

# =============================================================================
# Events
# =============================================================================
from ws_gateway.components.events import (
    Connect,
    Custom,
    Default,
    Disconnect,
    LifecycleEvent,
    LocalNotifier,
    Notification,
    Notifier,
    NullNotifier,
    RedisNotifier,
    parse_event,
)

# =============================================================================
# Transport
# =============================================================================
from ws_gateway.components.transport import (
    ApiGatewayTransport,
    Transport,
    build_apigateway_client,
)

__all__ = [
    # Core
    "NOTIFICATION_PREFIX",
    "NotificationName",
    "ResponseStatus",
    "RouteKey",
    "WSConstants",
    "sanitize_log_data",
    # Storage
    "KeyLayout",
    "MemoryBackend",
    "RedisBackend",
    "StoreBackend",
    "WriteBatch",
    # Events
    "Connect",
    "Custom",
    "Default",
    "Disconnect",
    "LifecycleEvent",
    "LocalNotifier",
    "Notification",
    "Notifier",
    "NullNotifier",
    "RedisNotifier",
    "parse_event",
    # Transport
    "ApiGatewayTransport",
    "Transport",
    "build_apigateway_client",
]
