from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from app.game.achievements.errors import AchievementEventPayloadError


@dataclass(frozen=True, slots=True)
class UserEvent:
    name: str
    user_id: int
    payload: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def get_int(self, key: str, default: int | None = None) -> int | None:
        value = self.payload.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            raise AchievementEventPayloadError(key)
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise AchievementEventPayloadError(key) from exc

    def get_datetime(self, key: str) -> datetime | None:
        """Read an aware datetime; ISO 8601 strings are parsed, naive values are taken as UTC."""
        value = self.payload.get(key)
        if value is None:
            return None
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value)
            except ValueError as exc:
                raise AchievementEventPayloadError(key) from exc
        if not isinstance(value, datetime):
            raise AchievementEventPayloadError(key)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Achievement(Protocol):
    code: str

    async def grant(self, session: AsyncSession, event: UserEvent) -> bool: ...
