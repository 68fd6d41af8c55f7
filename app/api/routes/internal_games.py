from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Query, Request

from app.api.routes.internal_access import assert_internal_access, require_acting_user_id
from app.api.routes.internal_errors import DomainError, to_http_exception
from app.api.routes.internal_games_models import (
    AchievementEvaluateRequest,
    AchievementEvaluateResponse,
    AnswerRequest,
    AnswerResponse,
    GameCreateRequest,
    GameInfoResponse,
    GameJoinResponse,
    GameLeaveResponse,
    GameListItemResponse,
    GameMemberResponse,
    GamePermissionResponse,
    GameProgressResponse,
    GameReportResponse,
    GameResponse,
    GameStartResponse,
    GameStopResponse,
    LeaderboardRowResponse,
    QuestionDetailResponse,
)
from app.core.config import get_settings
from app.db.session import SessionLocal
from app.game.achievements import UserEvent, evaluate_achievements
from app.game.quizzes.service import require_quiz_owner
from app.game.sessions import service as games
from app.game.sessions.internal import parse_duration
from app.game.sessions.types import GameSnapshot

router = APIRouter(tags=["internal", "games"])


def _game_response(snapshot: GameSnapshot) -> GameResponse:
    return GameResponse.model_validate(snapshot)


@router.post("/internal/games", response_model=GameResponse, status_code=201)
async def create_game(payload: GameCreateRequest, request: Request) -> GameResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    now_utc = datetime.now(timezone.utc)
    settings = get_settings()

    try:
        duration_seconds = payload.duration_seconds
        if duration_seconds is None and payload.duration is not None:
            duration_seconds = parse_duration(payload.duration)
        async with SessionLocal.begin() as session:
            await require_quiz_owner(session, user_id=actor_user_id, quiz_id=payload.quiz_id)
            snapshot = await games.create_game(
                session,
                quiz_id=payload.quiz_id,
                name=payload.name,
                duration_seconds=duration_seconds,
                now_utc=now_utc,
                max_duration_seconds=settings.game_max_duration_seconds,
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return _game_response(snapshot)


@router.get("/internal/games/open", response_model=list[GameListItemResponse])
async def list_open_games(request: Request) -> list[GameListItemResponse]:
    assert_internal_access(request)
    async with SessionLocal() as session:
        items = await games.list_open_games(session)
    return [GameListItemResponse.model_validate(item) for item in items]


@router.get("/internal/users/{user_id}/games", response_model=list[GameListItemResponse])
async def list_user_games(
    user_id: int,
    request: Request,
    scope: Literal["active", "hosted", "participated"] = Query(default="active"),
) -> list[GameListItemResponse]:
    assert_internal_access(request)
    async with SessionLocal() as session:
        if scope == "hosted":
            items = await games.list_hosted_games(session, user_id=user_id)
        elif scope == "participated":
            items = await games.list_participated_games(session, user_id=user_id)
        else:
            items = await games.list_active_games(session, user_id=user_id)
    return [GameListItemResponse.model_validate(item) for item in items]


@router.get("/internal/games/{game_id}", response_model=GameInfoResponse)
async def get_game_info(game_id: int, request: Request) -> GameInfoResponse:
    assert_internal_access(request)
    try:
        async with SessionLocal() as session:
            info = await games.get_game_info(session, game_id=game_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return GameInfoResponse.model_validate(info)


@router.get("/internal/games/{game_id}/permission", response_model=GamePermissionResponse)
async def get_game_permission(game_id: int, request: Request) -> GamePermissionResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    async with SessionLocal() as session:
        permission = await games.check_game_permission(session, user_id=actor_user_id, game_id=game_id)
    return GamePermissionResponse(
        game_id=game_id,
        user_id=actor_user_id,
        permission=permission.value,
    )


@router.post("/internal/games/{game_id}/start", response_model=GameStartResponse)
async def start_game(game_id: int, request: Request) -> GameStartResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            result = await games.start_game(
                session,
                actor_user_id=actor_user_id,
                game_id=game_id,
                now_utc=datetime.now(timezone.utc),
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return GameStartResponse(
        game=_game_response(result.snapshot),
        previous_starttime=result.previous_starttime,
        started_now=result.started_now,
    )


@router.post("/internal/games/{game_id}/stop", response_model=GameStopResponse)
async def stop_game(game_id: int, request: Request) -> GameStopResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            result = await games.stop_game(
                session,
                actor_user_id=actor_user_id,
                game_id=game_id,
                now_utc=datetime.now(timezone.utc),
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return GameStopResponse(
        game=_game_response(result.snapshot),
        previous_endtime=result.previous_endtime,
        stopped_now=result.stopped_now,
    )


@router.delete("/internal/games/{game_id}", status_code=204)
async def remove_game(game_id: int, request: Request) -> None:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            await games.remove_game(session, actor_user_id=actor_user_id, game_id=game_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc


@router.post("/internal/games/{game_id}/members", response_model=GameJoinResponse)
async def join_game(game_id: int, request: Request) -> GameJoinResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            result = await games.join_game(
                session,
                user_id=actor_user_id,
                game_id=game_id,
                now_utc=datetime.now(timezone.utc),
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return GameJoinResponse.model_validate(result)


@router.delete("/internal/games/{game_id}/members", response_model=GameLeaveResponse)
async def leave_game(game_id: int, request: Request) -> GameLeaveResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            left_now = await games.leave_game(session, user_id=actor_user_id, game_id=game_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return GameLeaveResponse(game_id=game_id, user_id=actor_user_id, left_now=left_now)


@router.get("/internal/games/{game_id}/members", response_model=list[GameMemberResponse])
async def list_game_members(game_id: int, request: Request) -> list[GameMemberResponse]:
    assert_internal_access(request)
    async with SessionLocal() as session:
        members = await games.list_game_members(session, game_id=game_id)
    return [GameMemberResponse.model_validate(member) for member in members]


@router.post("/internal/games/{game_id}/answers", response_model=AnswerResponse)
async def record_answer(game_id: int, payload: AnswerRequest, request: Request) -> AnswerResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal.begin() as session:
            result = await games.record_answer(
                session,
                user_id=actor_user_id,
                game_id=game_id,
                question_id=payload.question_id,
                question_correct=payload.question_correct,
                now_utc=datetime.now(timezone.utc),
            )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return AnswerResponse.model_validate(result)


@router.get("/internal/games/{game_id}/progress", response_model=GameProgressResponse)
async def get_game_progress(game_id: int, request: Request) -> GameProgressResponse:
    assert_internal_access(request)
    actor_user_id = require_acting_user_id(request)
    try:
        async with SessionLocal() as session:
            progress = await games.get_game_progress(session, user_id=actor_user_id, game_id=game_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return GameProgressResponse(
        game_id=progress.game_id,
        user_id=progress.user_id,
        answered_count=progress.answered_count,
        question_ids=list(progress.question_ids),
    )


@router.get("/internal/games/{game_id}/questions", response_model=list[QuestionDetailResponse])
async def get_question_details(game_id: int, request: Request) -> list[QuestionDetailResponse]:
    assert_internal_access(request)
    try:
        async with SessionLocal() as session:
            details = await games.get_question_details(session, game_id=game_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return [QuestionDetailResponse.model_validate(detail) for detail in details]


@router.get("/internal/games/{game_id}/report", response_model=GameReportResponse)
async def get_game_report(game_id: int, request: Request) -> GameReportResponse:
    assert_internal_access(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal() as session:
            rows = await games.build_game_report(session, game_id=game_id, now_utc=now_utc)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return GameReportResponse(
        game_id=game_id,
        generated_at=now_utc,
        rows=[LeaderboardRowResponse.model_validate(row) for row in rows],
    )


@router.post("/internal/achievements/evaluate", response_model=AchievementEvaluateResponse)
async def evaluate_user_achievements(
    payload: AchievementEvaluateRequest,
    request: Request,
) -> AchievementEvaluateResponse:
    assert_internal_access(request)
    event = UserEvent(name=payload.event_name, user_id=payload.user_id, payload=payload.payload)
    try:
        async with SessionLocal() as session:
            granted = await evaluate_achievements(session, event=event, codes=payload.codes)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return AchievementEvaluateResponse(user_id=payload.user_id, granted=granted)
