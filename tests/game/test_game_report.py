from __future__ import annotations

from datetime import timedelta

import pytest

from app.game.sessions.answers import record_answer
from app.game.sessions.errors import GameNotFoundError
from app.game.sessions.leaderboard import build_game_report
from app.game.sessions.lifecycle import start_game
from app.game.sessions.membership import join_game
from tests.game.game_fixtures import T0, _create_game, _create_quiz, _create_user, seed_alice_and_bob


@pytest.mark.asyncio
async def test_game_report_ranks_members_after_natural_end(session_factory) -> None:
    seed = await seed_alice_and_bob(session_factory)

    async with session_factory() as session:
        report = await build_game_report(
            session,
            game_id=seed["game_id"],
            now_utc=T0 + timedelta(minutes=11),
        )

    assert [(row.rank, row.username) for row in report] == [(1, "alice"), (2, "bob"), (3, "carol")]
    alice, bob, carol = report

    assert alice.questions_answered == 5
    assert alice.questions_answered_correct == 5
    assert alice.total_questions == 5
    assert alice.total_time_seconds == 240
    assert alice.user_endtime == T0 + timedelta(minutes=4)

    assert bob.questions_answered == 3
    assert bob.questions_answered_correct == 3
    assert bob.total_time_seconds == 600
    assert bob.time_per_question == 200

    assert carol.questions_answered is None
    assert carol.questions_answered_correct is None
    assert carol.time_per_question is None

    assert all(row.starttime == T0 for row in report)
    assert all(row.endtime == T0 + timedelta(minutes=10) for row in report)


@pytest.mark.asyncio
async def test_game_report_for_unknown_game_raises(session_factory) -> None:
    async with session_factory() as session:
        with pytest.raises(GameNotFoundError):
            await build_game_report(session, game_id=12345, now_utc=T0)


@pytest.mark.asyncio
async def test_game_report_sums_question_weights(session_factory) -> None:
    async with session_factory.begin() as session:
        owner_id = await _create_user(session, "host")
        dana_id = await _create_user(session, "dana")
        erin_id = await _create_user(session, "erin")
        quiz_id, (light_id, heavy_id) = await _create_quiz(session, owner_user_id=owner_id, weights=(1, 3))
        game_id = await _create_game(session, quiz_id=quiz_id, duration_seconds=600)
        for user_id in (dana_id, erin_id):
            await join_game(session, user_id=user_id, game_id=game_id, now_utc=T0)

    async with session_factory.begin() as session:
        await start_game(session, actor_user_id=owner_id, game_id=game_id, now_utc=T0)

    async with session_factory.begin() as session:
        for user_id, question_id, correct, minute in (
            (dana_id, light_id, 0, 1),
            (dana_id, heavy_id, 100, 2),
            (erin_id, light_id, 100, 1),
        ):
            await record_answer(
                session,
                user_id=user_id,
                game_id=game_id,
                question_id=question_id,
                question_correct=correct,
                now_utc=T0 + timedelta(minutes=minute),
            )

    async with session_factory() as session:
        report = await build_game_report(session, game_id=game_id, now_utc=T0 + timedelta(minutes=5))

    dana, erin = report
    assert (dana.rank, dana.username) == (1, "dana")
    assert (dana.questions_answered, dana.questions_answered_correct, dana.total_questions) == (4, 3, 4)
    assert dana.questions_answered_count == 2
    assert dana.total_time_seconds == 120
    assert dana.time_per_question == 60

    assert (erin.rank, erin.username) == (2, "erin")
    assert (erin.questions_answered, erin.questions_answered_correct, erin.total_questions) == (1, 1, 4)
    assert erin.total_time_seconds == 300
