"""
Tests for the Lambda entrypoint.
"""

import json
from unittest.mock import patch

import pytest

from shared.config.logging import request_id_var
from shared.config.settings import get_settings
from tests.conftest import lifecycle_event
from ws_gateway import lambda_handler


@pytest.fixture
def lambda_settings(settings):
    with patch.object(lambda_handler, "get_settings", return_value=settings):
        yield settings


@pytest.fixture
def invalid_environment(monkeypatch):
    """A store driver the settings do not accept."""
    monkeypatch.setenv("WS_STORE_DRIVER", "database")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestResolveEndpoint:
    """Management endpoint resolution."""

    def test_configured_endpoint_wins(self, settings):
        event = {"requestContext": {"domainName": "other.example.com", "stage": "dev"}}

        resolved = lambda_handler.resolve_endpoint(settings, event)

        assert resolved.ws_api_gateway_endpoint == settings.ws_api_gateway_endpoint

    def test_endpoint_derived_from_event(self, settings):
        settings = settings.model_copy(update={"ws_api_gateway_endpoint": None})
        event = {
            "requestContext": {
                "domainName": "abc123.execute-api.us-east-1.amazonaws.com",
                "stage": "prod",
            }
        }

        resolved = lambda_handler.resolve_endpoint(settings, event)

        assert (
            resolved.ws_api_gateway_endpoint
            == "https://abc123.execute-api.us-east-1.amazonaws.com/prod"
        )
        assert settings.ws_api_gateway_endpoint is None


class TestHandler:
    """handler() always answers."""

    def test_connect_returns_200(self, lambda_settings):
        response = lambda_handler.handler(lifecycle_event("abc", "$connect", user_id=7), None)

        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"message": "Connected"}

    def test_custom_route_returns_200(self, lambda_settings):
        response = lambda_handler.handler(lifecycle_event("abc", "myRoute", body="{}"), None)

        assert response["statusCode"] == 200

    def test_invalid_event_returns_500(self, lambda_settings):
        response = lambda_handler.handler({"requestContext": {}}, None)

        assert response["statusCode"] == 500

    def test_build_failure_returns_500(self, lambda_settings):
        with patch.object(lambda_handler, "open_manager", side_effect=RuntimeError("boom")):
            response = lambda_handler.handler(lifecycle_event("abc", "$connect"), None)

        assert response["statusCode"] == 500
        assert json.loads(response["body"]) == {"error": "Internal server error"}

    def test_request_id_is_reset(self, lambda_settings):
        event = lifecycle_event("abc", "$default", body="{}")
        event["requestContext"]["requestId"] = "req-1"

        lambda_handler.handler(event, None)

        assert request_id_var.get() == ""

    def test_invalid_settings_return_500(self, invalid_environment):
        response = lambda_handler.handler(lifecycle_event("abc", "$connect"), None)

        assert response["statusCode"] == 500
        assert json.loads(response["body"]) == {"error": "Internal server error"}
