from __future__ import annotations

from datetime import timedelta

import pytest

from app.game.sessions.errors import GameNotFoundError
from app.game.sessions.lifecycle import start_game, stop_game
from app.game.sessions.membership import join_game
from app.game.sessions.queries import (
    get_game_info,
    get_question_details,
    list_active_games,
    list_hosted_games,
    list_open_games,
    list_participated_games,
)
from tests.game.game_fixtures import T0, _create_game, _create_quiz, _create_user


async def _seed_games(session_factory) -> dict[str, int]:
    async with session_factory.begin() as session:
        host_id = await _create_user(session, "host")
        player_id = await _create_user(session, "player")
        quiz_id, _ = await _create_quiz(session, owner_user_id=host_id, weights=(1, 2))
        open_game = await _create_game(session, quiz_id=quiz_id, name="Open")
        running_game = await _create_game(session, quiz_id=quiz_id, name="Running")
        stopped_game = await _create_game(session, quiz_id=quiz_id, name="Stopped")
        for game_id in (open_game, running_game, stopped_game):
            await join_game(session, user_id=player_id, game_id=game_id, now_utc=T0)

    async with session_factory.begin() as session:
        await start_game(session, actor_user_id=host_id, game_id=running_game, now_utc=T0)
        await start_game(session, actor_user_id=host_id, game_id=stopped_game, now_utc=T0)
    async with session_factory.begin() as session:
        await stop_game(
            session,
            actor_user_id=player_id,
            game_id=stopped_game,
            now_utc=T0 + timedelta(minutes=1),
        )

    return {
        "host_id": host_id,
        "player_id": player_id,
        "quiz_id": quiz_id,
        "open": open_game,
        "running": running_game,
        "stopped": stopped_game,
    }


@pytest.mark.asyncio
async def test_game_listings_split_by_state(session_factory) -> None:
    seed = await _seed_games(session_factory)

    async with session_factory() as session:
        open_games = await list_open_games(session)
        active = await list_active_games(session, user_id=seed["player_id"])
        host_active = await list_active_games(session, user_id=seed["host_id"])
        hosted = await list_hosted_games(session, user_id=seed["host_id"])
        participated = await list_participated_games(session, user_id=seed["player_id"])

    assert [(game.game_id, game.owner_username, game.members) for game in open_games] == [
        (seed["open"], "host", 1)
    ]
    assert open_games[0].calc_endtime is None

    assert [game.game_id for game in active] == [seed["running"]]
    assert active[0].calc_endtime == T0 + timedelta(minutes=10)
    assert host_active == []

    assert [game.game_id for game in hosted] == [seed["open"], seed["running"], seed["stopped"]]
    assert all(game.members == 1 for game in hosted)
    assert [game.game_id for game in participated] == [seed["open"], seed["running"], seed["stopped"]]


@pytest.mark.asyncio
async def test_get_game_info_includes_quiz_and_owner(session_factory) -> None:
    seed = await _seed_games(session_factory)

    async with session_factory() as session:
        info = await get_game_info(session, game_id=seed["stopped"])
        with pytest.raises(GameNotFoundError):
            await get_game_info(session, game_id=seed["stopped"] + 100)

    assert info.gamename == "Stopped"
    assert info.quiz_id == seed["quiz_id"]
    assert info.owner_id == seed["host_id"]
    assert info.quizname == "Capitals"
    assert info.starttime == T0
    assert info.endtime == T0 + timedelta(minutes=1)
    assert info.calc_endtime == T0 + timedelta(minutes=10)
    assert info.created_at == T0


@pytest.mark.asyncio
async def test_question_details_lists_every_quiz_question(session_factory) -> None:
    seed = await _seed_games(session_factory)

    async with session_factory() as session:
        details = await get_question_details(session, game_id=seed["open"])
        with pytest.raises(GameNotFoundError):
            await get_question_details(session, game_id=seed["open"] + 100)

    assert [(detail.weight, detail.answered_total) for detail in details] == [(1, 0), (2, 0)]
    assert details[0].questiontext == "Capitals question 1?"
