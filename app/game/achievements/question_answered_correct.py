from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.question_performances_repo import QuestionPerformancesRepo
from app.game.achievements.errors import AchievementEventPayloadError
from app.game.achievements.types import UserEvent


class QuestionAnsweredCorrectAchievement:
    code = "question-answered-correct"

    async def grant(self, session: AsyncSession, event: UserEvent) -> bool:
        question_count = event.get_int("question-count")
        if question_count is None:
            raise AchievementEventPayloadError("question-count")
        correct_total = await QuestionPerformancesRepo.count_correct_for_user(
            session,
            user_id=event.user_id,
        )
        return correct_total >= question_count
