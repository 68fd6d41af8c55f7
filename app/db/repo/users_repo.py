from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def get_by_username(session: AsyncSession, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_ids(
        session: AsyncSession,
        user_ids: Sequence[int],
    ) -> list[User]:
        ids = tuple({int(user_id) for user_id in user_ids})
        if not ids:
            return []
        stmt = select(User).where(User.id.in_(ids)).order_by(User.id.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        username: str,
        created_at: datetime,
        is_superuser: bool = False,
    ) -> User:
        user = User(username=username, is_superuser=is_superuser, created_at=created_at)
        session.add(user)
        await session.flush()
        return user
