from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.question_performances_repo import QuestionPerformancesRepo
from app.db.repo.quizzes_repo import QuizzesRepo
from app.game.sessions.constants import QUESTION_CORRECTNESS_VALUES
from app.game.sessions.errors import GameInvalidInputError, GameNotRunningError
from app.game.sessions.internal import calc_endtime, ensure_utc, storage_guard
from app.game.sessions.permissions import require_game_member
from app.game.sessions.types import AnswerRecordResult

logger = structlog.get_logger(__name__)


async def record_answer(
    session: AsyncSession,
    *,
    user_id: int,
    game_id: int,
    question_id: int,
    question_correct: int,
    now_utc: datetime,
) -> AnswerRecordResult:
    if question_correct not in QUESTION_CORRECTNESS_VALUES:
        raise GameInvalidInputError("question_correct")

    game = await require_game_member(session, user_id=user_id, game_id=game_id, action="answer")
    starttime = ensure_utc(game.starttime)
    if starttime is None or game.endtime is not None:
        raise GameNotRunningError
    deadline = calc_endtime(starttime=starttime, duration_seconds=game.duration_seconds)
    if now_utc >= deadline:
        raise GameNotRunningError

    link = await QuizzesRepo.get_question_link(session, quiz_id=game.quiz_id, question_id=question_id)
    if link is None:
        raise GameInvalidInputError("question_id")

    with storage_guard("record_answer", game_id=game_id, user_id=user_id, question_id=question_id):
        recorded_now = await QuestionPerformancesRepo.create_once(
            session,
            game_id=game_id,
            user_id=user_id,
            question_id=question_id,
            question_correct=question_correct,
            answered_at=now_utc,
        )

    if recorded_now:
        logger.info(
            "game_answer_recorded",
            game_id=game_id,
            user_id=user_id,
            question_id=question_id,
            question_correct=question_correct,
        )
    return AnswerRecordResult(
        game_id=game_id,
        user_id=user_id,
        question_id=question_id,
        question_correct=question_correct,
        recorded_now=recorded_now,
    )
