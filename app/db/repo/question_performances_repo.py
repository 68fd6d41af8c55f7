from __future__ import annotations

from datetime import datetime

from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.game_members import GameMember
from app.db.models.game_sessions import GameSession
from app.db.models.question_performances import QuestionPerformance
from app.db.models.questions import Question
from app.db.models.quiz_questions import QuizQuestion
from app.db.models.users import User
from app.db.repo.dialect_insert import dialect_insert
from app.game.sessions.constants import QUESTION_CORRECT, QUESTION_WRONG


class QuestionPerformancesRepo:
    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        game_id: int,
        user_id: int,
        question_id: int,
        question_correct: int,
        answered_at: datetime,
    ) -> bool:
        stmt = (
            dialect_insert(session, QuestionPerformance)
            .values(
                gamesession_id=game_id,
                user_id=user_id,
                question_id=question_id,
                question_correct=question_correct,
                answered_at=answered_at,
            )
            .on_conflict_do_nothing(
                index_elements=[
                    QuestionPerformance.gamesession_id,
                    QuestionPerformance.user_id,
                    QuestionPerformance.question_id,
                ]
            )
            .returning(QuestionPerformance.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def delete_for_game(session: AsyncSession, *, game_id: int) -> int:
        stmt = delete(QuestionPerformance).where(QuestionPerformance.gamesession_id == game_id)
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def count_for_user_in_game(session: AsyncSession, *, game_id: int, user_id: int) -> int:
        stmt = select(func.count(QuestionPerformance.id)).where(
            QuestionPerformance.gamesession_id == game_id,
            QuestionPerformance.user_id == user_id,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_correct_for_user(session: AsyncSession, *, user_id: int) -> int:
        stmt = select(func.count(QuestionPerformance.id)).where(
            QuestionPerformance.user_id == user_id,
            QuestionPerformance.question_correct > 0,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def aggregate_members_for_game(
        session: AsyncSession,
        *,
        game_id: int,
    ) -> list[dict[str, object]]:
        """One row per member: answer count, answered/correct weight and last answer time.

        Members without answers are kept by the outer join and report a zero count.
        """
        correct_weight = func.sum(
            case((QuestionPerformance.question_correct == QUESTION_CORRECT, QuizQuestion.weight), else_=0)
        )
        stmt = (
            select(
                GameMember.user_id,
                User.username,
                func.count(QuestionPerformance.id).label("answered_count"),
                func.coalesce(func.sum(QuizQuestion.weight), 0).label("answered_weight"),
                func.coalesce(correct_weight, 0).label("correct_weight"),
                func.max(QuestionPerformance.answered_at).label("user_endtime"),
            )
            .select_from(GameMember)
            .join(User, User.id == GameMember.user_id)
            .join(GameSession, GameSession.id == GameMember.gamesession_id)
            .outerjoin(
                QuestionPerformance,
                (QuestionPerformance.gamesession_id == GameMember.gamesession_id)
                & (QuestionPerformance.user_id == GameMember.user_id),
            )
            .outerjoin(
                QuizQuestion,
                (QuizQuestion.quiz_id == GameSession.quiz_id)
                & (QuizQuestion.question_id == QuestionPerformance.question_id),
            )
            .where(GameMember.gamesession_id == game_id)
            .group_by(GameMember.user_id, User.username)
        )
        result = await session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def question_stats_for_game(
        session: AsyncSession,
        *,
        game_id: int,
    ) -> list[dict[str, object]]:
        stmt = (
            select(
                Question.id.label("question_id"),
                Question.questiontext,
                func.count(QuestionPerformance.id).label("answered_total"),
                func.coalesce(
                    func.sum(case((QuestionPerformance.question_correct == QUESTION_CORRECT, 1), else_=0)),
                    0,
                ).label("answered_correct"),
                func.coalesce(
                    func.sum(case((QuestionPerformance.question_correct == QUESTION_WRONG, 1), else_=0)),
                    0,
                ).label("answered_wrong"),
                QuizQuestion.weight,
            )
            .select_from(GameSession)
            .join(QuizQuestion, QuizQuestion.quiz_id == GameSession.quiz_id)
            .join(Question, Question.id == QuizQuestion.question_id)
            .outerjoin(
                QuestionPerformance,
                (QuestionPerformance.gamesession_id == GameSession.id)
                & (QuestionPerformance.question_id == QuizQuestion.question_id),
            )
            .where(GameSession.id == game_id)
            .group_by(Question.id, Question.questiontext, QuizQuestion.weight)
            .order_by(Question.id.asc())
        )
        result = await session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]
