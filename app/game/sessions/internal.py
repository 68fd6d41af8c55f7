from __future__ import annotations

import re
from contextlib import AbstractContextManager
from datetime import datetime, timedelta, timezone
from typing import Any

from app.db.models.game_sessions import GameSession
from app.game.sessions.errors import GameInvalidInputError, GameStorageError
from app.game.sessions.types import GameListItem, GameSnapshot
from app.game.storage import guard_storage

UTC = timezone.utc
DURATION_RE = re.compile(r"^(?P<hours>\d{1,3}):(?P<minutes>[0-5]\d):(?P<seconds>[0-5]\d)$")


def ensure_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_duration(value: str) -> int:
    """Parse an ``HH:MM:SS`` duration into whole seconds."""
    match = DURATION_RE.match(value.strip())
    if match is None:
        raise GameInvalidInputError("duration")
    return (
        int(match.group("hours")) * 3600
        + int(match.group("minutes")) * 60
        + int(match.group("seconds"))
    )


def calc_endtime(*, starttime: datetime | None, duration_seconds: int) -> datetime | None:
    if starttime is None:
        return None
    return starttime + timedelta(seconds=int(duration_seconds))


def build_game_snapshot(game: GameSession) -> GameSnapshot:
    return GameSnapshot(
        game_id=int(game.id),
        quiz_id=int(game.quiz_id),
        name=game.name,
        duration_seconds=int(game.duration_seconds),
        starttime=ensure_utc(game.starttime),
        endtime=ensure_utc(game.endtime),
        created_at=ensure_utc(game.created_at),
    )


def build_game_list_item(row: dict[str, Any]) -> GameListItem:
    starttime = ensure_utc(row.get("starttime"))
    duration_seconds = int(row["duration_seconds"])
    return GameListItem(
        game_id=int(row["game_id"]),
        name=str(row["name"]),
        members=int(row.get("members") or 0),
        starttime=starttime,
        duration_seconds=duration_seconds,
        calc_endtime=calc_endtime(starttime=starttime, duration_seconds=duration_seconds),
        owner_username=row.get("owner_username"),
    )


def storage_guard(operation: str, **context: Any) -> AbstractContextManager[None]:
    return guard_storage(
        operation,
        error_type=GameStorageError,
        log_event="game_storage_failed",
        **context,
    )
