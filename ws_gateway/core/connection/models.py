"""
Connection record.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Connection(BaseModel):
    """
    Persisted state of one client connection.

    channels has set semantics: no duplicates, join order kept.
    """

    connection_id: str
    connected_at: datetime = Field(default_factory=utcnow)
    user_id: int | None = None
    route_key: str = "$connect"
    channels: list[str] = Field(default_factory=list)

    @field_validator("connected_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("channels")
    @classmethod
    def _dedupe_channels(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    def age_minutes(self, now: datetime) -> float:
        """Minutes elapsed since connected_at."""
        return (now - self.connected_at).total_seconds() / 60
