from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from app.api.routes.internal_access import assert_internal_access, require_acting_user_id
from app.api.routes.internal_content_models import (
    QuestionCreateRequest,
    QuestionResponse,
    QuizCreateRequest,
    QuizQuestionAddRequest,
    QuizQuestionAddResponse,
    QuizResponse,
    UserContentResponse,
    UserCreateRequest,
    UserResponse,
)
from app.api.routes.internal_errors import DomainError, to_http_exception
from app.api.routes.internal_games_models import GameListItemResponse
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal
from app.game.quizzes import service as quizzes

router = APIRouter(tags=["internal", "content"])
logger = structlog.get_logger(__name__)


@router.post("/internal/users", response_model=UserResponse, status_code=201)
async def create_user(payload: UserCreateRequest, request: Request) -> UserResponse:
    assert_internal_access(request)
    username = payload.username.strip()
    if not username:
        raise HTTPException(status_code=422, detail={"code": "E_USER_INVALID_INPUT", "field": "username"})
    try:
        async with SessionLocal.begin() as session:
            user = await UsersRepo.create(
                session,
                username=username,
                is_superuser=payload.is_superuser,
                created_at=datetime.now(timezone.utc),
            )
            response = UserResponse(
                user_id=int(user.id),
                username=user.username,
                is_superuser=bool(user.is_superuser),
                created_at=user.created_at,
            )
    except IntegrityError as exc:
        logger.info("user_create_conflict", username=username)
        raise HTTPException(status_code=409, detail={"code": "E_USER_EXISTS"}) from exc
    return response


@router.post("/internal/quizzes", response_model=QuizResponse, status_code=201)
async def create_quiz(payload: QuizCreateRequest, request: Request) -> QuizResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            quiz = await quizzes.create_quiz(
                session,
                owner_user_id=actor_user_id,
                name=payload.name,
                now_utc=datetime.now(timezone.utc),
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return QuizResponse.model_validate(quiz)


@router.post("/internal/questions", response_model=QuestionResponse, status_code=201)
async def create_question(payload: QuestionCreateRequest, request: Request) -> QuestionResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            question = await quizzes.create_question(
                session,
                author_user_id=actor_user_id,
                category_id=payload.category_id,
                questiontext=payload.questiontext,
                now_utc=datetime.now(timezone.utc),
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return QuestionResponse.model_validate(question)


@router.post("/internal/quizzes/{quiz_id}/questions", response_model=QuizQuestionAddResponse)
async def add_question_to_quiz(
    quiz_id: int,
    payload: QuizQuestionAddRequest,
    request: Request,
) -> QuizQuestionAddResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            result = await quizzes.add_question_to_quiz(
                session,
                actor_user_id=actor_user_id,
                quiz_id=quiz_id,
                question_id=payload.question_id,
                weight=payload.weight,
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return QuizQuestionAddResponse.model_validate(result)


@router.get("/internal/users/{user_id}/content", response_model=UserContentResponse)
async def get_user_content(user_id: int, request: Request) -> UserContentResponse:
    assert_internal_access(request)
    async with SessionLocal() as session:
        content = await quizzes.get_user_content(session, user_id=user_id)
    return UserContentResponse(
        user_id=content.user_id,
        questions=[QuestionResponse.model_validate(item) for item in content.questions],
        quizzes=[QuizResponse.model_validate(item) for item in content.quizzes],
        games=[GameListItemResponse.model_validate(item) for item in content.games],
    )
