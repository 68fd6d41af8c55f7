from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.game_members import GameMember
from app.db.models.users import User
from app.db.repo.dialect_insert import dialect_insert


class GameMembersRepo:
    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        game_id: int,
        user_id: int,
        joined_at: datetime,
    ) -> bool:
        stmt = (
            dialect_insert(session, GameMember)
            .values(gamesession_id=game_id, user_id=user_id, joined_at=joined_at)
            .on_conflict_do_nothing(
                index_elements=[GameMember.gamesession_id, GameMember.user_id]
            )
            .returning(GameMember.user_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def delete_one(session: AsyncSession, *, game_id: int, user_id: int) -> int:
        stmt = delete(GameMember).where(
            GameMember.gamesession_id == game_id,
            GameMember.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def delete_for_game(session: AsyncSession, *, game_id: int) -> int:
        stmt = delete(GameMember).where(GameMember.gamesession_id == game_id)
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def is_member(session: AsyncSession, *, game_id: int, user_id: int) -> bool:
        stmt = select(GameMember.user_id).where(
            GameMember.gamesession_id == game_id,
            GameMember.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def count_for_game(session: AsyncSession, *, game_id: int) -> int:
        stmt = select(func.count(GameMember.user_id)).where(GameMember.gamesession_id == game_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def list_rows_for_game(
        session: AsyncSession,
        *,
        game_id: int,
    ) -> list[dict[str, object]]:
        stmt = (
            select(
                GameMember.user_id,
                User.username,
                GameMember.joined_at,
            )
            .join(User, User.id == GameMember.user_id)
            .where(GameMember.gamesession_id == game_id)
            .order_by(GameMember.joined_at.asc(), GameMember.user_id.asc())
        )
        result = await session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]
