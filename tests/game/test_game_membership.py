from __future__ import annotations

from datetime import timedelta

import pytest

from app.game.sessions.errors import GameNotFoundError
from app.game.sessions.membership import is_game_member, join_game, leave_game, list_game_members
from tests.game.game_fixtures import T0, _create_game, _create_quiz, _create_user


@pytest.mark.asyncio
async def test_join_game_is_idempotent(session_factory) -> None:
    async with session_factory.begin() as session:
        owner_id = await _create_user(session, "owner")
        player_id = await _create_user(session, "player")
        quiz_id, _ = await _create_quiz(session, owner_user_id=owner_id)
        game_id = await _create_game(session, quiz_id=quiz_id)

    async with session_factory.begin() as session:
        first = await join_game(session, user_id=player_id, game_id=game_id, now_utc=T0)
    async with session_factory.begin() as session:
        second = await join_game(
            session,
            user_id=player_id,
            game_id=game_id,
            now_utc=T0 + timedelta(minutes=1),
        )

    assert first.joined_now is True
    assert first.members_total == 1
    assert second.joined_now is False
    assert second.members_total == 1

    async with session_factory() as session:
        members = await list_game_members(session, game_id=game_id)
    assert [(member.user_id, member.username, member.joined_at) for member in members] == [
        (player_id, "player", T0)
    ]


@pytest.mark.asyncio
async def test_join_unknown_game_raises_not_found(session_factory) -> None:
    async with session_factory.begin() as session:
        player_id = await _create_user(session, "player")
        with pytest.raises(GameNotFoundError):
            await join_game(session, user_id=player_id, game_id=404, now_utc=T0)


@pytest.mark.asyncio
async def test_leave_game_removes_membership_once(session_factory) -> None:
    async with session_factory.begin() as session:
        owner_id = await _create_user(session, "owner")
        alice_id = await _create_user(session, "alice")
        bob_id = await _create_user(session, "bob")
        quiz_id, _ = await _create_quiz(session, owner_user_id=owner_id)
        game_id = await _create_game(session, quiz_id=quiz_id)
        await join_game(session, user_id=alice_id, game_id=game_id, now_utc=T0)
        await join_game(session, user_id=bob_id, game_id=game_id, now_utc=T0 + timedelta(seconds=5))

    async with session_factory.begin() as session:
        assert await leave_game(session, user_id=alice_id, game_id=game_id) is True
    async with session_factory.begin() as session:
        assert await leave_game(session, user_id=alice_id, game_id=game_id) is False

    async with session_factory() as session:
        assert await is_game_member(session, user_id=alice_id, game_id=game_id) is False
        assert await is_game_member(session, user_id=bob_id, game_id=game_id) is True
        members = await list_game_members(session, game_id=game_id)
    assert [member.username for member in members] == ["bob"]
