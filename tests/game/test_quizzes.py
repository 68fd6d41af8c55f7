from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from app.db.repo.quizzes_repo import QuizzesRepo
from app.game.quizzes import service as quizzes
from app.game.quizzes.errors import (
    QuizInvalidInputError,
    QuizNotFoundError,
    QuizStorageError,
    QuizUnauthorizedError,
)
from app.game.quizzes.types import QuizPermission
from tests.game.game_fixtures import T0, _create_game, _create_quiz, _create_user


@pytest.mark.asyncio
async def test_check_quiz_permission_is_tri_state(session_factory) -> None:
    async with session_factory.begin() as session:
        owner_id = await _create_user(session, "owner")
        other_id = await _create_user(session, "other")
        quiz_id, _ = await _create_quiz(session, owner_user_id=owner_id)

    async with session_factory() as session:
        assert await quizzes.check_quiz_permission(session, user_id=owner_id, quiz_id=quiz_id) is QuizPermission.OWNER
        assert (
            await quizzes.check_quiz_permission(session, user_id=other_id, quiz_id=quiz_id)
            is QuizPermission.NOT_OWNER
        )
        assert (
            await quizzes.check_quiz_permission(session, user_id=owner_id, quiz_id=quiz_id + 50)
            is QuizPermission.NOT_FOUND
        )
        with pytest.raises(QuizNotFoundError):
            await quizzes.require_quiz_owner(session, user_id=owner_id, quiz_id=quiz_id + 50)
        with pytest.raises(QuizUnauthorizedError):
            await quizzes.require_quiz_owner(session, user_id=other_id, quiz_id=quiz_id)


@pytest.mark.asyncio
async def test_add_question_to_quiz_is_owner_only_and_idempotent(session_factory) -> None:
    async with session_factory.begin() as session:
        owner_id = await _create_user(session, "owner")
        other_id = await _create_user(session, "other")
        quiz_id, question_ids = await _create_quiz(session, owner_user_id=owner_id, weights=(3,))

    async with session_factory.begin() as session:
        again = await quizzes.add_question_to_quiz(
            session,
            actor_user_id=owner_id,
            quiz_id=quiz_id,
            question_id=question_ids[0],
            weight=3,
        )
        with pytest.raises(QuizUnauthorizedError):
            await quizzes.add_question_to_quiz(
                session,
                actor_user_id=other_id,
                quiz_id=quiz_id,
                question_id=question_ids[0],
            )
        with pytest.raises(QuizInvalidInputError):
            await quizzes.add_question_to_quiz(
                session,
                actor_user_id=owner_id,
                quiz_id=quiz_id,
                question_id=question_ids[0],
                weight=0,
            )
        with pytest.raises(QuizInvalidInputError):
            await quizzes.add_question_to_quiz(
                session,
                actor_user_id=owner_id,
                quiz_id=quiz_id,
                question_id=9999,
            )

    assert again.added_now is False


@pytest.mark.asyncio
async def test_create_content_validates_input(session_factory) -> None:
    async with session_factory.begin() as session:
        owner_id = await _create_user(session, "owner")
        with pytest.raises(QuizInvalidInputError):
            await quizzes.create_quiz(session, owner_user_id=owner_id, name=" ", now_utc=T0)
        with pytest.raises(QuizInvalidInputError):
            await quizzes.create_question(
                session,
                author_user_id=owner_id,
                category_id=404,
                questiontext="Where?",
                now_utc=T0,
            )
        with pytest.raises(QuizInvalidInputError):
            await quizzes.create_question(
                session,
                author_user_id=owner_id,
                category_id=404,
                questiontext="",
                now_utc=T0,
            )


@pytest.mark.asyncio
async def test_get_user_content_lists_questions_quizzes_and_games(session_factory) -> None:
    async with session_factory.begin() as session:
        owner_id = await _create_user(session, "owner")
        other_id = await _create_user(session, "other")
        quiz_id, question_ids = await _create_quiz(session, owner_user_id=owner_id, weights=(1, 1))
        game_id = await _create_game(session, quiz_id=quiz_id, name="Hosted")

    async with session_factory() as session:
        content = await quizzes.get_user_content(session, user_id=owner_id)
        other_content = await quizzes.get_user_content(session, user_id=other_id)

    assert [question.question_id for question in content.questions] == question_ids
    assert [quiz.quiz_id for quiz in content.quizzes] == [quiz_id]
    assert [(game.game_id, game.name, game.members) for game in content.games] == [(game_id, "Hosted", 0)]
    assert content.quizzes[0].created_at == T0
    assert other_content.questions == ()
    assert other_content.games == ()


async def _failing_write(*args, **kwargs):
    raise OperationalError("write", {}, Exception("database is locked"))


@pytest.mark.asyncio
async def test_quiz_writes_surface_storage_errors(session_factory, monkeypatch) -> None:
    async with session_factory.begin() as session:
        owner_id = await _create_user(session, "owner")
        quiz_id, question_ids = await _create_quiz(session, owner_user_id=owner_id, weights=(1,))
    monkeypatch.setattr(QuizzesRepo, "create", staticmethod(_failing_write))
    monkeypatch.setattr(QuizzesRepo, "add_question_once", staticmethod(_failing_write))

    async with session_factory() as session:
        with pytest.raises(QuizStorageError):
            await quizzes.create_quiz(session, owner_user_id=owner_id, name="Rivers", now_utc=T0)
        with pytest.raises(QuizStorageError):
            await quizzes.add_question_to_quiz(
                session,
                actor_user_id=owner_id,
                quiz_id=quiz_id,
                question_id=question_ids[0],
                weight=2,
            )
