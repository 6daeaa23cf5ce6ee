"""
Lifecycle Event Value Objects.

An API Gateway WebSocket event is parsed once into one of four immutable
variants: Connect, Disconnect, Default or Custom. Custom carries the route
key as data, so dispatch is a lookup on the variant type rather than a
string-built handler name.

Usage:
    event = parse_event(raw_event)
    if isinstance(event, Custom):
        print(event.name, event.payload)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from shared.config.logging import get_logger
from ws_gateway.components.core.constants import RouteKey

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Connect:
    """$connect: a client finished the WebSocket handshake."""

    connection_id: str
    user_id: int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    route_key = RouteKey.CONNECT.value


@dataclass(frozen=True, slots=True)
class Disconnect:
    """$disconnect: the client or the gateway closed the connection."""

    connection_id: str
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    route_key = RouteKey.DISCONNECT.value


@dataclass(frozen=True, slots=True)
class Default:
    """$default: a message that matched no custom route."""

    connection_id: str
    payload: Any = field(default_factory=dict)
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    route_key = RouteKey.DEFAULT.value


@dataclass(frozen=True, slots=True)
class Custom:
    """A message routed to a custom route key."""

    connection_id: str
    name: str
    payload: Any = field(default_factory=dict)
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def route_key(self) -> str:
        return self.name


LifecycleEvent = Connect | Disconnect | Default | Custom


def decode_body(body: Any) -> dict[str, Any]:
    """
    Leniently decode a message body.

    Absent, empty or malformed bodies become an empty dict. Valid JSON that
    is not an object is wrapped as {"data": value} so listeners always
    receive a mapping.
    """
    if body is None or body == "":
        return {}
    if isinstance(body, dict):
        return body
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str):
        return {}
    try:
        decoded = json.loads(body)
    except (ValueError, TypeError):
        logger.debug("Malformed message body treated as empty", length=len(body))
        return {}
    if isinstance(decoded, dict):
        return decoded
    if decoded is None:
        return {}
    return {"data": decoded}


def _coerce_user_id(value: Any) -> int | None:
    """Authorizer context values arrive as strings; accept numeric ones."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        logger.warning("Ignoring non-numeric authorizer userId")
        return None


def parse_event(raw: Mapping[str, Any]) -> LifecycleEvent:
    """
    Parse an API Gateway WebSocket event into its lifecycle variant.

    Expected shape:
        {
            "requestContext": {
                "connectionId": "abc=",
                "routeKey": "$connect",
                "authorizer": {"userId": 7},
            },
            "body": "{\"foo\": \"bar\"}",
        }
    """
    context = raw.get("requestContext") or {}
    connection_id = str(context.get("connectionId") or "")
    route_key = str(context.get("routeKey") or "")

    if route_key == RouteKey.CONNECT:
        authorizer = context.get("authorizer") or {}
        return Connect(
            connection_id=connection_id,
            user_id=_coerce_user_id(authorizer.get("userId")),
            raw=raw,
        )

    if route_key == RouteKey.DISCONNECT:
        return Disconnect(connection_id=connection_id, raw=raw)

    payload = decode_body(raw.get("body"))
    if route_key == RouteKey.DEFAULT:
        return Default(connection_id=connection_id, payload=payload, raw=raw)

    return Custom(connection_id=connection_id, name=route_key, payload=payload, raw=raw)
