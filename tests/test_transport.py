"""
Tests for the API Gateway Management API transport.

Tests verify:
- GoneException maps to TransportGone, other errors to TransportError
- Client construction from settings
"""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from shared.utils.exceptions import ConfigurationError, TransportError, TransportGone
from ws_gateway.components.transport.apigateway import (
    ApiGatewayTransport,
    build_apigateway_client,
)


def _client_error(code: str, status: int) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        "PostToConnection",
    )


class TestPostToConnection:
    """Error translation of post()."""

    @pytest.mark.asyncio
    async def test_post_passes_connection_and_data(self):
        client = MagicMock()
        transport = ApiGatewayTransport(client)

        await transport.post("abc", b"{}")

        client.post_to_connection.assert_called_once_with(ConnectionId="abc", Data=b"{}")

    @pytest.mark.asyncio
    async def test_gone_exception_raises_transport_gone(self):
        client = MagicMock()
        client.post_to_connection.side_effect = _client_error("GoneException", 410)

        with pytest.raises(TransportGone) as exc_info:
            await ApiGatewayTransport(client).post("abc", b"{}")

        assert exc_info.value.connection_id == "abc"
        assert exc_info.value.code == "GoneException"

    @pytest.mark.asyncio
    async def test_other_client_error_raises_transport_error(self):
        client = MagicMock()
        client.post_to_connection.side_effect = _client_error("LimitExceededException", 429)

        with pytest.raises(TransportError) as exc_info:
            await ApiGatewayTransport(client).post("abc", b"{}")

        assert not isinstance(exc_info.value, TransportGone)
        assert exc_info.value.code == "LimitExceededException"

    @pytest.mark.asyncio
    async def test_botocore_error_raises_transport_error(self):
        client = MagicMock()
        client.post_to_connection.side_effect = EndpointConnectionError(
            endpoint_url="https://example.invalid"
        )

        with pytest.raises(TransportError):
            await ApiGatewayTransport(client).post("abc", b"{}")


class TestManagementCalls:
    """DeleteConnection and GetConnection."""

    @pytest.mark.asyncio
    async def test_delete_gone_raises_transport_gone(self):
        client = MagicMock()
        client.delete_connection.side_effect = _client_error("GoneException", 410)

        with pytest.raises(TransportGone):
            await ApiGatewayTransport(client).delete("abc")

    @pytest.mark.asyncio
    async def test_get_info_strips_response_metadata(self):
        client = MagicMock()
        client.get_connection.return_value = {
            "ConnectedAt": "2024-01-01T12:00:00Z",
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }

        info = await ApiGatewayTransport(client).get_info("abc")

        assert info == {"ConnectedAt": "2024-01-01T12:00:00Z"}


class TestClientConstruction:
    """build_apigateway_client and lazy construction."""

    def test_missing_endpoint_raises(self, settings):
        settings = settings.model_copy(update={"ws_api_gateway_endpoint": None})

        with pytest.raises(ConfigurationError):
            build_apigateway_client(settings)

    def test_static_credentials_are_passed(self, settings):
        settings = settings.model_copy(
            update={"aws_access_key_id": "AKIA", "aws_secret_access_key": "secret"}
        )

        with patch("ws_gateway.components.transport.apigateway.boto3.client") as factory:
            build_apigateway_client(settings)

        kwargs = factory.call_args.kwargs
        assert factory.call_args.args == ("apigatewaymanagementapi",)
        assert kwargs["endpoint_url"] == settings.ws_api_gateway_endpoint
        assert kwargs["aws_access_key_id"] == "AKIA"
        assert kwargs["aws_secret_access_key"] == "secret"
        assert "aws_session_token" not in kwargs

    def test_default_credential_chain_without_secret(self, settings):
        settings = settings.model_copy(update={"aws_access_key_id": "AKIA"})

        with patch("ws_gateway.components.transport.apigateway.boto3.client") as factory:
            build_apigateway_client(settings)

        assert "aws_access_key_id" not in factory.call_args.kwargs

    def test_client_is_built_lazily(self, settings):
        with patch("ws_gateway.components.transport.apigateway.boto3.client") as factory:
            transport = ApiGatewayTransport.from_settings(settings)
            factory.assert_not_called()

            assert transport.client is factory.return_value
            assert transport.client is factory.return_value

        factory.assert_called_once()

    def test_needs_client_or_settings(self):
        with pytest.raises(ConfigurationError):
            ApiGatewayTransport()


class TestUnconfiguredEndpoint:
    """Calls made without a management endpoint."""

    @pytest.mark.asyncio
    async def test_post_raises_transport_error(self, settings):
        settings = settings.model_copy(update={"ws_api_gateway_endpoint": None})
        transport = ApiGatewayTransport.from_settings(settings)

        with pytest.raises(TransportError) as exc_info:
            await transport.post("abc", b"{}")

        assert not isinstance(exc_info.value, TransportGone)
        assert exc_info.value.code == "ConfigurationError"
        assert isinstance(exc_info.value.__cause__, ConfigurationError)
