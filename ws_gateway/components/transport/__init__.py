"""
Outbound transport to WebSocket clients.
"""

from ws_gateway.components.transport.apigateway import (
    ApiGatewayTransport,
    Transport,
    build_apigateway_client,
)

__all__ = [
    "ApiGatewayTransport",
    "Transport",
    "build_apigateway_client",
]
