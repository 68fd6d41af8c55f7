from __future__ import annotations

from collections.abc import Iterable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.game.achievements.errors import UnknownAchievementError
from app.game.achievements.game_win_fastest import GameWinFastestAchievement
from app.game.achievements.question_answered_correct import QuestionAnsweredCorrectAchievement
from app.game.achievements.types import Achievement, UserEvent

logger = structlog.get_logger(__name__)

ACHIEVEMENTS: dict[str, Achievement] = {
    achievement.code: achievement
    for achievement in (
        GameWinFastestAchievement(),
        QuestionAnsweredCorrectAchievement(),
    )
}


def get_achievement(code: str) -> Achievement:
    try:
        return ACHIEVEMENTS[code]
    except KeyError as exc:
        raise UnknownAchievementError(code) from exc


async def evaluate_achievements(
    session: AsyncSession,
    *,
    event: UserEvent,
    codes: Iterable[str],
) -> list[str]:
    """Run the named predicates for an event and return the codes that were granted.

    Recording the award is left to the caller.
    """
    granted: list[str] = []
    for code in codes:
        achievement = get_achievement(code)
        if await achievement.grant(session, event):
            granted.append(code)
    if granted:
        logger.info(
            "achievements_granted",
            event_name=event.name,
            user_id=event.user_id,
            codes=granted,
        )
    return granted
