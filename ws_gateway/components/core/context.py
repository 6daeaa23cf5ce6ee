"""
Log sanitizing for client-controlled values.

Route keys, connection ids and bodies arrive from the client side of the
gateway and must not be able to forge log lines.
"""

from __future__ import annotations

import re

# Pattern to remove control characters from log data, including Unicode
# direction overrides
_CONTROL_CHAR_PATTERN = re.compile(
    r'[\x00-\x1f\x7f-\x9f'  # ASCII control characters
    r'\u200b-\u200f'  # Zero-width and direction marks
    r'\u202a-\u202e'  # Bidirectional text formatting (RTL override, etc.)
    r'\u2066-\u2069'  # Isolate formatting characters
    r'\ufeff]'  # BOM / Zero-width no-break space
)


def sanitize_log_data(data: object, max_length: int = 100) -> str:
    """
    Sanitize a client-controlled value before logging.

    Non-string values (ids from a malformed event) are logged by their str().
    Truncates first so escaping can never cut an escape sequence in half.
    """
    if data is None:
        return ""
    if not isinstance(data, str):
        data = str(data)

    truncated = data[:max_length] if len(data) > max_length else data
    was_truncated = len(data) > max_length

    sanitized = _CONTROL_CHAR_PATTERN.sub('', truncated)

    # Replace backslashes first to avoid double-escaping
    sanitized = sanitized.replace('\\', '\\\\')
    sanitized = sanitized.replace('"', '\\"')

    if was_truncated:
        return sanitized + "..."
    return sanitized


def event_log_fields(
    connection_id: object,
    route_key: object,
    max_route_key_length: int = 128,
) -> dict[str, str]:
    """Sanitized identity of a lifecycle event for structured log calls."""
    return {
        "connection_id": sanitize_log_data(connection_id),
        "route_key": sanitize_log_data(route_key, max_route_key_length),
    }
