from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.categories import Category


def _parent_ids_subquery():
    return select(Category.parent_id).where(Category.parent_id.is_not(None)).scalar_subquery()


class CategoriesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, category_id: int) -> Category | None:
        return await session.get(Category, category_id)

    @staticmethod
    async def create(session: AsyncSession, *, name: str, parent_id: int | None) -> Category:
        category = Category(name=name, parent_id=parent_id)
        session.add(category)
        await session.flush()
        return category

    @staticmethod
    async def delete_by_id(session: AsyncSession, category_id: int) -> int:
        stmt = delete(Category).where(Category.id == category_id)
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def list_children(session: AsyncSession, *, parent_id: int) -> list[Category]:
        stmt = (
            select(Category)
            .where(Category.parent_id == parent_id)
            .order_by(Category.name.asc(), Category.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_leaves(session: AsyncSession) -> list[Category]:
        stmt = (
            select(Category)
            .where(Category.id.not_in(_parent_ids_subquery()))
            .order_by(Category.name.asc(), Category.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def is_leaf(session: AsyncSession, category_id: int) -> bool:
        stmt = select(Category.id).where(
            Category.id == category_id,
            Category.id.not_in(_parent_ids_subquery()),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_middle(session: AsyncSession) -> list[Category]:
        stmt = (
            select(Category)
            .where(
                Category.parent_id.is_not(None),
                Category.id.in_(_parent_ids_subquery()),
            )
            .order_by(Category.name.asc(), Category.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
