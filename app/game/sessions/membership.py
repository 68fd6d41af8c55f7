from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.game_members_repo import GameMembersRepo
from app.db.repo.game_sessions_repo import GameSessionsRepo
from app.game.sessions.errors import GameNotFoundError
from app.game.sessions.internal import ensure_utc, storage_guard
from app.game.sessions.types import GameJoinResult, GameMemberSnapshot

logger = structlog.get_logger(__name__)


async def join_game(
    session: AsyncSession,
    *,
    user_id: int,
    game_id: int,
    now_utc: datetime,
) -> GameJoinResult:
    game = await GameSessionsRepo.get_by_id(session, game_id)
    if game is None:
        raise GameNotFoundError

    with storage_guard("join_game", game_id=game_id, user_id=user_id):
        joined_now = await GameMembersRepo.create_once(
            session,
            game_id=game_id,
            user_id=user_id,
            joined_at=now_utc,
        )
        members_total = await GameMembersRepo.count_for_game(session, game_id=game_id)

    if joined_now:
        logger.info("game_member_joined", game_id=game_id, user_id=user_id, members_total=members_total)
    return GameJoinResult(
        game_id=game_id,
        user_id=user_id,
        joined_now=joined_now,
        members_total=members_total,
    )


async def leave_game(session: AsyncSession, *, user_id: int, game_id: int) -> bool:
    with storage_guard("leave_game", game_id=game_id, user_id=user_id):
        removed = await GameMembersRepo.delete_one(session, game_id=game_id, user_id=user_id)
    if removed:
        logger.info("game_member_left", game_id=game_id, user_id=user_id)
    return removed > 0


async def is_game_member(session: AsyncSession, *, user_id: int, game_id: int) -> bool:
    return await GameMembersRepo.is_member(session, game_id=game_id, user_id=user_id)


async def list_game_members(session: AsyncSession, *, game_id: int) -> tuple[GameMemberSnapshot, ...]:
    rows = await GameMembersRepo.list_rows_for_game(session, game_id=game_id)
    return tuple(
        GameMemberSnapshot(
            user_id=int(row["user_id"]),
            username=str(row["username"]),
            joined_at=ensure_utc(row["joined_at"]),
        )
        for row in rows
    )
