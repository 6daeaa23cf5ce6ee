"""
Store key layout.

    {prefix}connection:{id}  -> Connection record (JSON)
    {prefix}connections      -> Connection Set (ordered by first insert)
    {prefix}channel:{name}   -> channel member set (ordered by join)
"""

from __future__ import annotations

from dataclasses import dataclass

from ws_gateway.components.core.constants import WSConstants


@dataclass(frozen=True, slots=True)
class KeyLayout:
    """Builds every key the registry writes, under a common prefix."""

    prefix: str = WSConstants.KEY_PREFIX

    def connection(self, connection_id: str) -> str:
        return f"{self.prefix}connection:{connection_id}"

    def connections(self) -> str:
        return f"{self.prefix}connections"

    def channel(self, channel: str) -> str:
        return f"{self.prefix}channel:{channel}"
