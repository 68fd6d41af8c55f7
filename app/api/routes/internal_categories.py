from __future__ import annotations

from fastapi import APIRouter, Query, Request

from app.api.routes.internal_access import assert_internal_access, require_acting_user_id
from app.api.routes.internal_content_models import (
    CategoryCreateRequest,
    CategoryResponse,
    CategoryTrueChildResponse,
    CategoryWithCountResponse,
    QuestionCountResponse,
    QuestionResponse,
)
from app.api.routes.internal_errors import DomainError, to_http_exception
from app.db.session import SessionLocal
from app.game.categories import service as categories
from app.game.categories.types import CategorySnapshot
from app.game.quizzes.service import build_question_snapshot

router = APIRouter(tags=["internal", "categories"])


async def _with_counts(session, items: list[CategorySnapshot]) -> list[CategoryWithCountResponse]:
    counted = await categories.with_question_counts(session, items)
    return [
        CategoryWithCountResponse(
            category_id=item.category.category_id,
            name=item.category.name,
            parent_id=item.category.parent_id,
            question_count=item.question_count,
        )
        for item in counted
    ]


@router.post("/internal/categories", response_model=CategoryResponse, status_code=201)
async def create_category(payload: CategoryCreateRequest, request: Request) -> CategoryResponse:
    assert_internal_access(request)
    try:
        async with SessionLocal.begin() as session:
            category = await categories.create_category(
                session,
                name=payload.name,
                parent_id=payload.parent_id,
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return CategoryResponse.model_validate(category)


@router.get("/internal/categories/true-children", response_model=list[CategoryWithCountResponse])
async def list_true_children(request: Request) -> list[CategoryWithCountResponse]:
    assert_internal_access(request)
    async with SessionLocal() as session:
        items = await categories.list_true_children(session)
        return await _with_counts(session, items)


@router.get("/internal/categories/middle", response_model=list[CategoryWithCountResponse])
async def list_middle(request: Request) -> list[CategoryWithCountResponse]:
    assert_internal_access(request)
    async with SessionLocal() as session:
        items = await categories.list_middle(session)
        return await _with_counts(session, items)


@router.get("/internal/categories/question-count", response_model=QuestionCountResponse)
async def count_all_questions(request: Request) -> QuestionCountResponse:
    assert_internal_access(request)
    async with SessionLocal() as session:
        total = await categories.count_all_questions(session)
    return QuestionCountResponse(question_count=total)


@router.get("/internal/categories/{category_id}", response_model=CategoryWithCountResponse)
async def get_category(category_id: int, request: Request) -> CategoryWithCountResponse:
    assert_internal_access(request)
    try:
        async with SessionLocal() as session:
            category = await categories.get_category(session, category_id=category_id)
            counted = await _with_counts(session, [category])
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return counted[0]


@router.get(
    "/internal/categories/{category_id}/true-child",
    response_model=CategoryTrueChildResponse,
)
async def get_is_true_child(category_id: int, request: Request) -> CategoryTrueChildResponse:
    assert_internal_access(request)
    async with SessionLocal() as session:
        is_leaf = await categories.is_true_child(session, category_id=category_id)
    return CategoryTrueChildResponse(category_id=category_id, is_true_child=is_leaf)


@router.get("/internal/categories/{category_id}/children", response_model=list[CategoryResponse])
async def list_children(
    category_id: int,
    request: Request,
    recursive: bool = Query(default=False),
) -> list[CategoryResponse]:
    assert_internal_access(request)
    async with SessionLocal() as session:
        if recursive:
            items = await categories.list_descendants(session, category_id=category_id)
        else:
            items = await categories.list_children(session, category_id=category_id)
    return [CategoryResponse.model_validate(item) for item in items]


@router.get("/internal/categories/{category_id}/questions", response_model=list[QuestionResponse])
async def list_questions(category_id: int, request: Request) -> list[QuestionResponse]:
    assert_internal_access(request)
    async with SessionLocal() as session:
        questions = await categories.list_questions(session, category_id=category_id)
    return [QuestionResponse.model_validate(build_question_snapshot(item)) for item in questions]


@router.delete("/internal/categories/{category_id}", status_code=204)
async def remove_category(category_id: int, request: Request) -> None:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            await categories.remove_category(
                session,
                actor_user_id=actor_user_id,
                category_id=category_id,
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
