from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.question_performances import QuestionPerformance
from app.db.models.questions import Question
from app.db.models.quiz_questions import QuizQuestion


class QuestionsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, question_id: int) -> Question | None:
        return await session.get(Question, question_id)

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        user_id: int,
        category_id: int,
        questiontext: str,
        created_at: datetime,
    ) -> Question:
        question = Question(
            user_id=user_id,
            category_id=category_id,
            questiontext=questiontext,
            created_at=created_at,
        )
        session.add(question)
        await session.flush()
        return question

    @staticmethod
    async def list_by_category(session: AsyncSession, *, category_id: int) -> list[Question]:
        stmt = select(Question).where(Question.category_id == category_id).order_by(Question.id.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_by_user(session: AsyncSession, *, user_id: int) -> list[Question]:
        stmt = select(Question).where(Question.user_id == user_id).order_by(Question.id.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def count_by_category(session: AsyncSession, *, category_id: int) -> int:
        stmt = select(func.count(Question.id)).where(Question.category_id == category_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_by_categories(
        session: AsyncSession,
        *,
        category_ids: Sequence[int],
    ) -> int:
        ids = tuple({int(category_id) for category_id in category_ids})
        if not ids:
            return 0
        stmt = select(func.count(Question.id)).where(Question.category_id.in_(ids))
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_all(session: AsyncSession) -> int:
        result = await session.execute(select(func.count(Question.id)))
        return int(result.scalar_one() or 0)

    @staticmethod
    async def delete_by_categories(
        session: AsyncSession,
        *,
        category_ids: Sequence[int],
    ) -> int:
        """Delete the questions of the given categories with their quiz links and answers."""
        ids = tuple({int(category_id) for category_id in category_ids})
        if not ids:
            return 0
        question_ids = select(Question.id).where(Question.category_id.in_(ids))
        await session.execute(
            delete(QuestionPerformance).where(QuestionPerformance.question_id.in_(question_ids))
        )
        await session.execute(delete(QuizQuestion).where(QuizQuestion.question_id.in_(question_ids)))
        result = await session.execute(delete(Question).where(Question.category_id.in_(ids)))
        return result.rowcount or 0
