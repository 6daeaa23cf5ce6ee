"""
Lifecycle Event Dispatcher.

Turns an API Gateway WebSocket event into store mutations and
notifications, and always answers with a response for the gateway:

    $connect     -> store record, notify websocket.connected
    $disconnect  -> remove record, notify websocket.disconnected
    $default     -> notify websocket.message with the decoded body
    <route key>  -> notify websocket.<route key> with the decoded body

Any failure while handling is logged and answered with a 500; nothing is
raised back to the gateway.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping

from shared.config.logging import get_logger
from shared.utils.exceptions import HandlerError
from ws_gateway.components.core.constants import (
    NotificationName,
    ResponseStatus,
    WSConstants,
)
from ws_gateway.components.core.context import event_log_fields
from ws_gateway.components.events.notifications import Notification, NullNotifier
from ws_gateway.components.events.types import (
    Connect,
    Custom,
    Default,
    Disconnect,
    LifecycleEvent,
    parse_event,
)
from ws_gateway.core.connection.models import Connection

if TYPE_CHECKING:
    from ws_gateway.components.events.notifications import Notifier
    from ws_gateway.core.connection.store import ConnectionStore

logger = get_logger(__name__)


def make_response(status: int, body: dict[str, Any]) -> dict[str, Any]:
    """API Gateway integration response."""
    return {"statusCode": int(status), "body": json.dumps(body)}


class Dispatcher:
    """Routes lifecycle events to their handlers."""

    def __init__(self, store: "ConnectionStore", notifier: "Notifier | None" = None) -> None:
        self._store = store
        self._notifier = notifier or NullNotifier()
        self._handlers: dict[type, Callable[[Any], Awaitable[dict[str, Any]]]] = {
            Connect: self._on_connect,
            Disconnect: self._on_disconnect,
            Default: self._on_default,
            Custom: self._on_custom,
        }

    async def handle(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Handle one raw gateway event. Never raises."""
        context = raw.get("requestContext") if isinstance(raw, Mapping) else None
        if not isinstance(context, Mapping):
            context = {}
        fields = event_log_fields(
            context.get("connectionId"),
            context.get("routeKey"),
            WSConstants.MAX_LOGGED_ROUTE_KEY,
        )
        logger.info("WebSocket event received", **fields)

        try:
            event = parse_event(raw)
            if not event.connection_id:
                raise ValueError("Event has no connectionId")
            if not event.route_key:
                raise ValueError("Event has no routeKey")
            return await self.dispatch(event)
        except Exception as e:
            error = HandlerError(fields["route_key"], fields["connection_id"], e)
            logger.error(str(error), exc_info=True, **error.context)
            return make_response(
                ResponseStatus.INTERNAL_ERROR,
                {"error": "Internal server error"},
            )

    async def dispatch(self, event: LifecycleEvent) -> dict[str, Any]:
        """Run the handler for an already parsed event."""
        handler = self._handlers[type(event)]
        return await handler(event)

    # =========================================================================
    # Handlers
    # =========================================================================

    async def _on_connect(self, event: Connect) -> dict[str, Any]:
        # Refreshing an existing record keeps its channel memberships
        existing = await self._store.get(event.connection_id)
        record = Connection(
            connection_id=event.connection_id,
            connected_at=self._store.now(),
            user_id=event.user_id,
            route_key=event.route_key,
            channels=existing.channels if existing else [],
        )
        await self._store.put(record)

        await self._notifier.emit(
            Notification(
                NotificationName.CONNECTED.value,
                {"connectionId": event.connection_id, "eventData": dict(event.raw)},
            )
        )
        return make_response(ResponseStatus.OK, {"message": "Connected"})

    async def _on_disconnect(self, event: Disconnect) -> dict[str, Any]:
        await self._store.remove(event.connection_id)

        await self._notifier.emit(
            Notification(
                NotificationName.DISCONNECTED.value,
                {"connectionId": event.connection_id, "eventData": dict(event.raw)},
            )
        )
        return make_response(ResponseStatus.OK, {"message": "Disconnected"})

    async def _on_default(self, event: Default) -> dict[str, Any]:
        await self._notifier.emit(
            Notification(
                NotificationName.MESSAGE.value,
                {
                    "connectionId": event.connection_id,
                    "message": event.payload,
                    "eventData": dict(event.raw),
                },
            )
        )
        return make_response(ResponseStatus.OK, {"message": "Message received"})

    async def _on_custom(self, event: Custom) -> dict[str, Any]:
        await self._notifier.emit(
            Notification.for_route(
                event.name,
                {
                    "connectionId": event.connection_id,
                    "message": event.payload,
                    "eventData": dict(event.raw),
                },
            )
        )
        return make_response(ResponseStatus.OK, {"message": "Custom route handled"})
