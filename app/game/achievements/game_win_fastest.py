from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.game.achievements.errors import AchievementEventPayloadError
from app.game.achievements.types import UserEvent
from app.game.sessions.leaderboard import build_game_report
from app.game.sessions.types import LeaderboardRow


def _fastest_user_id(report: Sequence[LeaderboardRow]) -> int | None:
    timed = [row for row in report if row.total_time_seconds is not None]
    if not timed:
        return None
    # min() keeps the first of equal times, i.e. the better ranked member.
    return min(timed, key=lambda row: row.total_time_seconds).user_id


def is_fastest_winner(
    report: Sequence[LeaderboardRow],
    *,
    user_id: int,
    member_count: int,
) -> bool:
    if not report or len(report) < member_count:
        return False
    winner_user_id = report[0].user_id
    return winner_user_id == user_id and _fastest_user_id(report) == user_id


class GameWinFastestAchievement:
    code = "game-win-fastest"

    async def grant(self, session: AsyncSession, event: UserEvent) -> bool:
        game_id = event.get_int("game-id")
        if game_id is None:
            raise AchievementEventPayloadError("game-id")
        member_count = event.get_int("member-count", 0)
        now_utc = event.get_datetime("now-utc") or datetime.now(timezone.utc)

        report = await build_game_report(session, game_id=game_id, now_utc=now_utc)
        return is_fastest_winner(report, user_id=event.user_id, member_count=member_count)
