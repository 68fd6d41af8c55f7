from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.quiz_questions import QuizQuestion
from app.db.models.quizzes import Quiz
from app.db.repo.dialect_insert import dialect_insert


class QuizzesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, quiz_id: int) -> Quiz | None:
        return await session.get(Quiz, quiz_id)

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        user_id: int,
        name: str,
        created_at: datetime,
    ) -> Quiz:
        quiz = Quiz(user_id=user_id, name=name, created_at=created_at)
        session.add(quiz)
        await session.flush()
        return quiz

    @staticmethod
    async def list_by_user(session: AsyncSession, *, user_id: int) -> list[Quiz]:
        stmt = select(Quiz).where(Quiz.user_id == user_id).order_by(Quiz.id.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def add_question_once(
        session: AsyncSession,
        *,
        quiz_id: int,
        question_id: int,
        weight: int,
    ) -> bool:
        stmt = (
            dialect_insert(session, QuizQuestion)
            .values(quiz_id=quiz_id, question_id=question_id, weight=weight)
            .on_conflict_do_nothing(
                index_elements=[QuizQuestion.quiz_id, QuizQuestion.question_id]
            )
            .returning(QuizQuestion.question_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_question_ids(session: AsyncSession, *, quiz_id: int) -> list[int]:
        stmt = (
            select(QuizQuestion.question_id)
            .where(QuizQuestion.quiz_id == quiz_id)
            .order_by(QuizQuestion.question_id.asc())
        )
        result = await session.execute(stmt)
        return [int(question_id) for question_id in result.scalars().all()]

    @staticmethod
    async def get_question_link(
        session: AsyncSession,
        *,
        quiz_id: int,
        question_id: int,
    ) -> QuizQuestion | None:
        return await session.get(QuizQuestion, (quiz_id, question_id))

    @staticmethod
    async def sum_weights(session: AsyncSession, *, quiz_id: int) -> int:
        stmt = select(func.coalesce(func.sum(QuizQuestion.weight), 0)).where(
            QuizQuestion.quiz_id == quiz_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)
