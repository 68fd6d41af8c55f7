from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.categories import Category
from app.db.models.questions import Question
from app.db.repo.categories_repo import CategoriesRepo
from app.db.repo.questions_repo import QuestionsRepo
from app.db.repo.users_repo import UsersRepo
from app.game.categories.errors import (
    CategoryInvalidInputError,
    CategoryNotFoundError,
    CategoryStorageError,
    CategoryUnauthorizedError,
)
from app.game.categories.types import CategorySnapshot, CategoryWithQuestionCount
from app.game.storage import guard_storage

logger = structlog.get_logger(__name__)

CATEGORY_NAME_MAX_LENGTH = 128


def _storage_guard(operation: str, **context: Any) -> AbstractContextManager[None]:
    return guard_storage(
        operation,
        error_type=CategoryStorageError,
        log_event="category_storage_failed",
        **context,
    )


def build_category_snapshot(category: Category) -> CategorySnapshot:
    return CategorySnapshot(
        category_id=int(category.id),
        name=category.name,
        parent_id=int(category.parent_id) if category.parent_id is not None else None,
    )


async def get_category(session: AsyncSession, *, category_id: int) -> CategorySnapshot:
    category = await CategoriesRepo.get_by_id(session, category_id)
    if category is None:
        raise CategoryNotFoundError
    return build_category_snapshot(category)


async def get_category_name(session: AsyncSession, *, category_id: int) -> str:
    return (await get_category(session, category_id=category_id)).name


async def create_category(
    session: AsyncSession,
    *,
    name: str | None,
    parent_id: int | None,
) -> CategorySnapshot:
    normalized = (name or "").strip()
    if not normalized or len(normalized) > CATEGORY_NAME_MAX_LENGTH:
        raise CategoryInvalidInputError("name")
    if parent_id is not None and await CategoriesRepo.get_by_id(session, parent_id) is None:
        raise CategoryNotFoundError

    with _storage_guard("create_category", parent_id=parent_id):
        category = await CategoriesRepo.create(session, name=normalized, parent_id=parent_id)
    logger.info("category_created", category_id=category.id, parent_id=parent_id)
    return build_category_snapshot(category)


async def remove_category(
    session: AsyncSession,
    *,
    actor_user_id: int,
    category_id: int,
) -> None:
    """Delete a category together with its subtree and questions. Superusers only."""
    actor = await UsersRepo.get_by_id(session, actor_user_id)
    if actor is None or not actor.is_superuser:
        logger.warning("category_remove_denied", category_id=category_id, user_id=actor_user_id)
        raise CategoryUnauthorizedError

    if await CategoriesRepo.get_by_id(session, category_id) is None:
        raise CategoryNotFoundError

    subtree_ids = [category_id, *await list_descendant_ids(session, category_id=category_id)]
    with _storage_guard("remove_category", category_id=category_id):
        questions_removed = await QuestionsRepo.delete_by_categories(session, category_ids=subtree_ids)
        # Depth-first order reversed puts children before their parents.
        for subtree_id in reversed(subtree_ids):
            await CategoriesRepo.delete_by_id(session, subtree_id)
    logger.info(
        "category_removed",
        category_id=category_id,
        subtree_size=len(subtree_ids),
        questions_removed=questions_removed,
    )


async def list_children(session: AsyncSession, *, category_id: int) -> list[CategorySnapshot]:
    children = await CategoriesRepo.list_children(session, parent_id=category_id)
    return [build_category_snapshot(child) for child in children]


async def list_descendants(session: AsyncSession, *, category_id: int) -> list[CategorySnapshot]:
    """All categories below ``category_id``, depth first, siblings ordered by name."""
    descendants: list[CategorySnapshot] = []
    seen: set[int] = {category_id}
    stack = list(reversed(await CategoriesRepo.list_children(session, parent_id=category_id)))
    while stack:
        category = stack.pop()
        if category.id in seen:
            continue
        seen.add(category.id)
        descendants.append(build_category_snapshot(category))
        children = await CategoriesRepo.list_children(session, parent_id=category.id)
        stack.extend(reversed(children))
    return descendants


async def list_descendant_ids(session: AsyncSession, *, category_id: int) -> list[int]:
    return [item.category_id for item in await list_descendants(session, category_id=category_id)]


async def list_true_children(session: AsyncSession) -> list[CategorySnapshot]:
    return [build_category_snapshot(category) for category in await CategoriesRepo.list_leaves(session)]


async def is_true_child(session: AsyncSession, *, category_id: int) -> bool:
    return await CategoriesRepo.is_leaf(session, category_id)


async def list_middle(session: AsyncSession) -> list[CategorySnapshot]:
    return [build_category_snapshot(category) for category in await CategoriesRepo.list_middle(session)]


async def list_questions(session: AsyncSession, *, category_id: int) -> list[Question]:
    return await QuestionsRepo.list_by_category(session, category_id=category_id)


async def count_questions(session: AsyncSession, *, category_id: int) -> int:
    return await QuestionsRepo.count_by_category(session, category_id=category_id)


async def count_all_questions(session: AsyncSession) -> int:
    return await QuestionsRepo.count_all(session)


async def with_question_counts(
    session: AsyncSession,
    categories: Sequence[CategorySnapshot],
) -> list[CategoryWithQuestionCount]:
    counted: list[CategoryWithQuestionCount] = []
    for category in categories:
        subtree_ids = [
            category.category_id,
            *await list_descendant_ids(session, category_id=category.category_id),
        ]
        question_count = await QuestionsRepo.count_by_categories(session, category_ids=subtree_ids)
        counted.append(CategoryWithQuestionCount(category=category, question_count=question_count))
    return counted
