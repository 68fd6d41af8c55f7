from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.game_members import GameMember
from app.db.models.game_sessions import GameSession
from app.db.models.quizzes import Quiz
from app.db.models.users import User


def _member_counts_subquery():
    return (
        select(
            GameMember.gamesession_id.label("gamesession_id"),
            func.count(GameMember.user_id).label("members"),
        )
        .group_by(GameMember.gamesession_id)
        .subquery("member_counts")
    )


class GameSessionsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, game: GameSession) -> GameSession:
        session.add(game)
        await session.flush()
        return game

    @staticmethod
    async def get_by_id(session: AsyncSession, game_id: int) -> GameSession | None:
        return await session.get(GameSession, game_id)

    @staticmethod
    async def get_owner_user_id(session: AsyncSession, game_id: int) -> int | None:
        stmt = (
            select(Quiz.user_id)
            .join(GameSession, GameSession.quiz_id == Quiz.id)
            .where(GameSession.id == game_id)
        )
        result = await session.execute(stmt)
        owner_user_id = result.scalar_one_or_none()
        return int(owner_user_id) if owner_user_id is not None else None

    @staticmethod
    async def set_starttime_if_missing(
        session: AsyncSession,
        *,
        game_id: int,
        starttime: datetime,
    ) -> bool:
        stmt = (
            update(GameSession)
            .where(
                GameSession.id == game_id,
                GameSession.starttime.is_(None),
            )
            .values(starttime=starttime)
            .returning(GameSession.id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def set_endtime_if_missing(
        session: AsyncSession,
        *,
        game_id: int,
        endtime: datetime,
    ) -> bool:
        stmt = (
            update(GameSession)
            .where(
                GameSession.id == game_id,
                GameSession.starttime.is_not(None),
                GameSession.endtime.is_(None),
            )
            .values(endtime=endtime)
            .returning(GameSession.id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def delete(session: AsyncSession, *, game: GameSession) -> None:
        await session.delete(game)
        await session.flush()

    @staticmethod
    async def get_info_row(session: AsyncSession, game_id: int) -> dict[str, object] | None:
        stmt = (
            select(
                GameSession.id.label("game_id"),
                GameSession.name.label("gamename"),
                GameSession.created_at,
                GameSession.starttime,
                GameSession.endtime,
                GameSession.duration_seconds,
                GameSession.quiz_id,
                Quiz.user_id.label("owner_id"),
                Quiz.name.label("quizname"),
                Quiz.created_at.label("quiz_created_at"),
            )
            .join(Quiz, Quiz.id == GameSession.quiz_id)
            .where(GameSession.id == game_id)
        )
        result = await session.execute(stmt)
        row = result.mappings().one_or_none()
        return dict(row) if row is not None else None

    @staticmethod
    async def list_open_rows(session: AsyncSession) -> list[dict[str, object]]:
        members = _member_counts_subquery()
        stmt = (
            select(
                GameSession.id.label("game_id"),
                GameSession.name,
                User.username.label("owner_username"),
                func.coalesce(members.c.members, 0).label("members"),
                GameSession.starttime,
                GameSession.duration_seconds,
            )
            .join(Quiz, Quiz.id == GameSession.quiz_id)
            .join(User, User.id == Quiz.user_id)
            .outerjoin(members, members.c.gamesession_id == GameSession.id)
            .where(GameSession.starttime.is_(None))
            .order_by(GameSession.created_at.asc(), GameSession.id.asc())
        )
        result = await session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def list_active_rows_for_user(
        session: AsyncSession,
        *,
        user_id: int,
    ) -> list[dict[str, object]]:
        members = _member_counts_subquery()
        stmt = (
            select(
                GameSession.id.label("game_id"),
                GameSession.name,
                User.username.label("owner_username"),
                func.coalesce(members.c.members, 0).label("members"),
                GameSession.starttime,
                GameSession.duration_seconds,
            )
            .join(Quiz, Quiz.id == GameSession.quiz_id)
            .join(User, User.id == Quiz.user_id)
            .join(GameMember, GameMember.gamesession_id == GameSession.id)
            .outerjoin(members, members.c.gamesession_id == GameSession.id)
            .where(
                GameMember.user_id == user_id,
                GameSession.starttime.is_not(None),
                GameSession.endtime.is_(None),
            )
            .order_by(GameSession.starttime.asc(), GameSession.id.asc())
        )
        result = await session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def list_hosted_rows(
        session: AsyncSession,
        *,
        user_id: int,
    ) -> list[dict[str, object]]:
        members = _member_counts_subquery()
        stmt = (
            select(
                GameSession.id.label("game_id"),
                GameSession.name,
                func.coalesce(members.c.members, 0).label("members"),
                GameSession.starttime,
                GameSession.duration_seconds,
            )
            .join(Quiz, Quiz.id == GameSession.quiz_id)
            .outerjoin(members, members.c.gamesession_id == GameSession.id)
            .where(Quiz.user_id == user_id)
            .order_by(GameSession.created_at.asc(), GameSession.id.asc())
        )
        result = await session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def list_participated_rows(
        session: AsyncSession,
        *,
        user_id: int,
    ) -> list[dict[str, object]]:
        members = _member_counts_subquery()
        joined_game_ids = select(GameMember.gamesession_id).where(GameMember.user_id == user_id)
        stmt = (
            select(
                GameSession.id.label("game_id"),
                GameSession.name,
                func.coalesce(members.c.members, 0).label("members"),
                GameSession.starttime,
                GameSession.duration_seconds,
            )
            .outerjoin(members, members.c.gamesession_id == GameSession.id)
            .where(GameSession.id.in_(joined_game_ids))
            .order_by(GameSession.created_at.asc(), GameSession.id.asc())
        )
        result = await session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]
