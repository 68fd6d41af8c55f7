from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.questions import Question
from app.db.models.quizzes import Quiz
from app.db.repo.categories_repo import CategoriesRepo
from app.db.repo.questions_repo import QuestionsRepo
from app.db.repo.quizzes_repo import QuizzesRepo
from app.game.quizzes.errors import (
    QuizInvalidInputError,
    QuizNotFoundError,
    QuizStorageError,
    QuizUnauthorizedError,
)
from app.game.quizzes.types import (
    QuestionSnapshot,
    QuizPermission,
    QuizQuestionLinkResult,
    QuizSnapshot,
    UserContentSnapshot,
)
from app.game.sessions.internal import ensure_utc
from app.game.sessions.queries import list_hosted_games
from app.game.storage import guard_storage

logger = structlog.get_logger(__name__)

QUIZ_NAME_MAX_LENGTH = 128


def _storage_guard(operation: str, **context: Any) -> AbstractContextManager[None]:
    return guard_storage(
        operation,
        error_type=QuizStorageError,
        log_event="quiz_storage_failed",
        **context,
    )


def build_quiz_snapshot(quiz: Quiz) -> QuizSnapshot:
    return QuizSnapshot(
        quiz_id=int(quiz.id),
        user_id=int(quiz.user_id),
        name=quiz.name,
        created_at=ensure_utc(quiz.created_at),
    )


def build_question_snapshot(question: Question) -> QuestionSnapshot:
    return QuestionSnapshot(
        question_id=int(question.id),
        user_id=int(question.user_id),
        category_id=int(question.category_id),
        questiontext=question.questiontext,
        created_at=ensure_utc(question.created_at),
    )


async def check_quiz_permission(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_id: int,
) -> QuizPermission:
    quiz = await QuizzesRepo.get_by_id(session, quiz_id)
    if quiz is None:
        return QuizPermission.NOT_FOUND
    if int(quiz.user_id) == user_id:
        return QuizPermission.OWNER
    return QuizPermission.NOT_OWNER


async def require_quiz_owner(session: AsyncSession, *, user_id: int, quiz_id: int) -> None:
    permission = await check_quiz_permission(session, user_id=user_id, quiz_id=quiz_id)
    if permission is QuizPermission.NOT_FOUND:
        raise QuizNotFoundError
    if permission is not QuizPermission.OWNER:
        logger.warning("quiz_action_denied", quiz_id=quiz_id, user_id=user_id)
        raise QuizUnauthorizedError


async def create_quiz(
    session: AsyncSession,
    *,
    owner_user_id: int,
    name: str | None,
    now_utc: datetime,
) -> QuizSnapshot:
    normalized = (name or "").strip()
    if not normalized or len(normalized) > QUIZ_NAME_MAX_LENGTH:
        raise QuizInvalidInputError("name")
    with _storage_guard("create_quiz", user_id=owner_user_id):
        quiz = await QuizzesRepo.create(session, user_id=owner_user_id, name=normalized, created_at=now_utc)
    logger.info("quiz_created", quiz_id=quiz.id, user_id=owner_user_id)
    return build_quiz_snapshot(quiz)


async def create_question(
    session: AsyncSession,
    *,
    author_user_id: int,
    category_id: int,
    questiontext: str | None,
    now_utc: datetime,
) -> QuestionSnapshot:
    normalized = (questiontext or "").strip()
    if not normalized:
        raise QuizInvalidInputError("questiontext")
    if await CategoriesRepo.get_by_id(session, category_id) is None:
        raise QuizInvalidInputError("category_id")
    with _storage_guard("create_question", user_id=author_user_id, category_id=category_id):
        question = await QuestionsRepo.create(
            session,
            user_id=author_user_id,
            category_id=category_id,
            questiontext=normalized,
            created_at=now_utc,
        )
    logger.info("question_created", question_id=question.id, category_id=category_id)
    return build_question_snapshot(question)


async def add_question_to_quiz(
    session: AsyncSession,
    *,
    actor_user_id: int,
    quiz_id: int,
    question_id: int,
    weight: int = 1,
) -> QuizQuestionLinkResult:
    if int(weight) <= 0:
        raise QuizInvalidInputError("weight")
    await require_quiz_owner(session, user_id=actor_user_id, quiz_id=quiz_id)
    if await QuestionsRepo.get_by_id(session, question_id) is None:
        raise QuizInvalidInputError("question_id")

    with _storage_guard("add_question_to_quiz", quiz_id=quiz_id, question_id=question_id):
        added_now = await QuizzesRepo.add_question_once(
            session,
            quiz_id=quiz_id,
            question_id=question_id,
            weight=int(weight),
        )
    return QuizQuestionLinkResult(
        quiz_id=quiz_id,
        question_id=question_id,
        weight=int(weight),
        added_now=added_now,
    )


async def get_user_content(session: AsyncSession, *, user_id: int) -> UserContentSnapshot:
    questions = await QuestionsRepo.list_by_user(session, user_id=user_id)
    quizzes = await QuizzesRepo.list_by_user(session, user_id=user_id)
    games = await list_hosted_games(session, user_id=user_id)
    return UserContentSnapshot(
        user_id=user_id,
        questions=tuple(build_question_snapshot(question) for question in questions),
        quizzes=tuple(build_quiz_snapshot(quiz) for quiz in quizzes),
        games=tuple(games),
    )
