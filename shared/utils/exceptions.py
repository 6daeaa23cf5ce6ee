"""
Centralized exceptions for the WebSocket registry.

Usage:
    from shared.utils.exceptions import StorageError, TransportGone

    raise StorageError("get", key=key) from exc
    raise TransportGone(connection_id, code="GoneException")

Propagation rules:
- StorageError: propagated to the caller, never retried here.
- TransportGone / TransportError: turned into a False delivery result by fan-out.
- HandlerError: caught at the dispatcher boundary and answered with a 500.
"""

from typing import Any


class WebSocketError(Exception):
    """
    Base exception carrying structured log context.

    The context is passed as keyword arguments to the structured logger:
        logger.error(str(exc), **exc.context)
    """

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class StorageError(WebSocketError):
    """
    The store backend is unavailable or timed out.

    Usage:
        raise StorageError("set", key="websocket:connection:abc")
    """

    def __init__(self, operation: str, **context: Any):
        super().__init__(f"Storage operation '{operation}' failed", operation=operation, **context)
        self.operation = operation


class TransportError(WebSocketError):
    """Delivery to a connection failed for a reason other than it being gone."""

    def __init__(self, connection_id: str, code: str | None = None, message: str | None = None):
        detail = message or "Failed to post to connection"
        super().__init__(detail, connection_id=connection_id, code=code)
        self.connection_id = connection_id
        self.code = code


class TransportGone(TransportError):
    """The gateway reports the connection no longer exists (HTTP 410)."""

    def __init__(self, connection_id: str, code: str | None = "GoneException"):
        super().__init__(connection_id, code=code, message="Connection is gone")


class HandlerError(WebSocketError):
    """Unexpected failure while processing a lifecycle event."""

    def __init__(self, route_key: str, connection_id: str, cause: BaseException):
        super().__init__(
            "WebSocket handler error",
            route_key=route_key,
            connection_id=connection_id,
            error=str(cause),
            error_type=type(cause).__name__,
        )
        self.route_key = route_key
        self.connection_id = connection_id


class ConfigurationError(WebSocketError):
    """Invalid settings combination detected while wiring components."""
