"""
Shared module for code used by every entrypoint of the WebSocket registry.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging

- shared.infrastructure: Redis client construction and teardown

- shared.utils: Utilities
  - exceptions.py: Storage / transport / handler error taxonomy

IMPORT EXAMPLES:
    from shared.config.settings import Settings, get_settings
    from shared.config.logging import get_logger, setup_logging
    from shared.infrastructure.redis_client import create_redis_client
    from shared.utils.exceptions import StorageError, TransportGone
"""
