"""
API Gateway Management API transport.

Pushes bytes to WebSocket clients through the management endpoint of the
API Gateway stage. boto3 is synchronous, so every call runs in a worker
thread and the event loop keeps serving other sends meanwhile.

Error mapping:
- ClientError GoneException (HTTP 410) -> TransportGone
- any other ClientError / BotoCoreError -> TransportError
- no endpoint configured -> TransportError (code "ConfigurationError")
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from shared.config.logging import get_logger
from shared.utils.exceptions import ConfigurationError, TransportError, TransportGone

if TYPE_CHECKING:
    from shared.config.settings import Settings

logger = get_logger(__name__)

GONE_ERROR_CODE = "GoneException"


class Transport(Protocol):
    """Outbound delivery to a single connection."""

    async def post(self, connection_id: str, data: bytes) -> None: ...

    async def delete(self, connection_id: str) -> None: ...


def build_apigateway_client(settings: "Settings") -> Any:
    """
    Return a configured boto3 apigatewaymanagementapi client.

    Uses explicit credentials from settings if both key and secret are
    provided, else falls back to standard AWS credential resolution
    (env vars, profiles, the Lambda execution role).
    """
    if not settings.ws_api_gateway_endpoint:
        raise ConfigurationError(
            "WS_API_GATEWAY_ENDPOINT is required to post to connections"
        )

    kwargs: dict[str, Any] = {
        "region_name": settings.ws_aws_region,
        "endpoint_url": settings.ws_api_gateway_endpoint,
    }

    if settings.has_static_credentials:
        kwargs.update(
            dict(
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
            )
        )
        if settings.aws_session_token:
            kwargs["aws_session_token"] = settings.aws_session_token

    kwargs["config"] = BotoConfig(
        retries={
            "mode": "standard",
            "max_attempts": settings.ws_transport_max_attempts,
        }
    )

    return boto3.client("apigatewaymanagementapi", **kwargs)


def _error_code(exc: ClientError) -> str | None:
    error_body = exc.response.get("Error", {}) if hasattr(exc, "response") else {}
    return error_body.get("Code")


def _status_code(exc: ClientError) -> int | None:
    metadata = exc.response.get("ResponseMetadata", {}) if hasattr(exc, "response") else {}
    return metadata.get("HTTPStatusCode")


def _translate(connection_id: str, exc: Exception) -> TransportError:
    if isinstance(exc, ClientError):
        code = _error_code(exc)
        if code == GONE_ERROR_CODE or _status_code(exc) == 410:
            return TransportGone(connection_id, code=code)
        return TransportError(connection_id, code=code, message=str(exc))
    return TransportError(connection_id, message=str(exc))


class ApiGatewayTransport:
    """
    Transport backed by the API Gateway Management API.

    Built from settings, the boto3 client is created on first use, so
    read-only callers never need an endpoint configured. Without an
    endpoint every send fails with a TransportError.
    """

    def __init__(self, client: Any = None, settings: "Settings | None" = None) -> None:
        if client is None and settings is None:
            raise ConfigurationError("ApiGatewayTransport needs a client or settings")
        self._client = client
        self._settings = settings

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ApiGatewayTransport":
        return cls(settings=settings)

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = build_apigateway_client(self._settings)
        return self._client

    async def _call(self, operation: str, connection_id: str, **kwargs: Any) -> Any:
        """Run one management API call in a worker thread, translating errors."""
        try:
            method = getattr(self.client, operation)
        except ConfigurationError as e:
            # No endpoint to post to: every call fails the same way
            raise TransportError(
                connection_id, code="ConfigurationError", message=str(e)
            ) from e
        try:
            return await asyncio.to_thread(method, ConnectionId=connection_id, **kwargs)
        except (ClientError, BotoCoreError) as e:
            raise _translate(connection_id, e) from e

    async def post(self, connection_id: str, data: bytes) -> None:
        """PostToConnection. Raises TransportGone or TransportError."""
        await self._call("post_to_connection", connection_id, Data=data)

    async def delete(self, connection_id: str) -> None:
        """DeleteConnection: force the gateway to close the client."""
        await self._call("delete_connection", connection_id)

    async def get_info(self, connection_id: str) -> dict[str, Any]:
        """GetConnection: connectedAt, lastActiveAt and the caller identity."""
        response = await self._call("get_connection", connection_id)
        response.pop("ResponseMetadata", None)
        return response
