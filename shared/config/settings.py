"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.

Settings are read once per entrypoint (Lambda handler, HTTP app, CLI) and
passed down explicitly; core components never import a settings singleton.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    # Environment
    environment: str = "development"
    debug: bool = False

    # API Gateway Management API (outbound transport)
    # Endpoint format: https://{api-id}.execute-api.{region}.amazonaws.com/{stage}
    ws_aws_region: str = "us-east-1"
    ws_api_gateway_endpoint: str | None = None
    # Optional static credentials; both key and secret must be set, otherwise
    # boto3 resolves credentials from its default provider chain
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_session_token: str = ""
    ws_transport_max_attempts: int = 3

    # Storage
    ws_store_driver: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379/0"
    redis_pool_max_connections: int = 20
    redis_socket_timeout: int = 5  # Socket timeout in seconds (connect and read/write)
    ws_key_prefix: str = "websocket:"
    ws_connection_ttl: int = 86400  # One day, refreshed on every write
    ws_stale_after_minutes: int = 1440  # Matches the TTL
    # "eventual": record + index writes go out as a plain batch
    # "atomic": record + index writes are wrapped in MULTI/EXEC
    ws_consistency: Literal["eventual", "atomic"] = "eventual"

    # Notifications
    ws_notifications_enabled: bool = True
    ws_notification_driver: Literal["local", "redis"] = "local"
    ws_notification_channel: str = "websocket:events"

    # Fan-out
    ws_fanout_batch_size: int = 50  # Connections sent to in parallel

    # Logging
    log_enabled: bool = True
    log_level: str = "INFO"

    # Rate limiting - thresholds only, enforced by the gateway in front of us
    rate_limit_enabled: bool = False
    rate_limit_connections_per_minute: int = 60
    rate_limit_messages_per_minute: int = 120

    # Authentication - enforced by the gateway authorizer
    auth_enabled: bool = False
    auth_guard: str = "api"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def has_static_credentials(self) -> bool:
        """True when both an access key and a secret are configured."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)

    def rate_limits(self) -> dict[str, int | bool]:
        """Rate limit thresholds, for collaborators that enforce them."""
        return {
            "enabled": self.rate_limit_enabled,
            "connections_per_minute": self.rate_limit_connections_per_minute,
            "messages_per_minute": self.rate_limit_messages_per_minute,
        }

    def validate_production(self) -> list[str]:
        """
        Validate that the configuration is usable in production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.environment == "production":
            if not self.ws_api_gateway_endpoint:
                errors.append(
                    "WS_API_GATEWAY_ENDPOINT must be set in production"
                )

            # The memory driver is per-process; Lambda invocations would not share state
            if self.ws_store_driver == "memory":
                errors.append(
                    "WS_STORE_DRIVER=memory cannot share state between invocations"
                )

            if self.debug:
                errors.append("DEBUG must be False in production")

            if bool(self.aws_access_key_id) != bool(self.aws_secret_access_key):
                errors.append(
                    "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set together"
                )

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
