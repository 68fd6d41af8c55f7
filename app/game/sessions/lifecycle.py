from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.game_sessions import GameSession
from app.db.repo.game_members_repo import GameMembersRepo
from app.db.repo.game_sessions_repo import GameSessionsRepo
from app.db.repo.question_performances_repo import QuestionPerformancesRepo
from app.db.repo.quizzes_repo import QuizzesRepo
from app.game.sessions.constants import GAME_NAME_MAX_LENGTH
from app.game.sessions.errors import GameInvalidInputError, GameNotStartedError
from app.game.sessions.internal import (
    build_game_snapshot,
    calc_endtime,
    ensure_utc,
    storage_guard,
)
from app.game.sessions.permissions import require_game_member, require_game_owner
from app.game.sessions.types import GameSnapshot, GameStartResult, GameStopResult

logger = structlog.get_logger(__name__)


def _normalize_game_name(name: str | None) -> str:
    normalized = (name or "").strip()
    if not normalized or len(normalized) > GAME_NAME_MAX_LENGTH:
        raise GameInvalidInputError("name")
    return normalized


def _normalize_duration(duration_seconds: int | None, *, max_duration_seconds: int | None) -> int:
    if duration_seconds is None:
        raise GameInvalidInputError("duration")
    resolved = int(duration_seconds)
    if resolved <= 0:
        raise GameInvalidInputError("duration")
    if max_duration_seconds is not None and resolved > max_duration_seconds:
        raise GameInvalidInputError("duration")
    return resolved


async def create_game(
    session: AsyncSession,
    *,
    quiz_id: int | None,
    name: str | None,
    duration_seconds: int | None,
    now_utc: datetime,
    max_duration_seconds: int | None = None,
) -> GameSnapshot:
    """Create a game for a quiz.

    Quiz ownership is not checked here; callers verify it before creating.
    """
    if quiz_id is None:
        raise GameInvalidInputError("quiz_id")
    game_name = _normalize_game_name(name)
    duration = _normalize_duration(duration_seconds, max_duration_seconds=max_duration_seconds)

    with storage_guard("create_game", quiz_id=quiz_id):
        quiz = await QuizzesRepo.get_by_id(session, quiz_id)
        if quiz is None:
            raise GameInvalidInputError("quiz_id")
        game = await GameSessionsRepo.create(
            session,
            game=GameSession(
                quiz_id=quiz_id,
                name=game_name,
                duration_seconds=duration,
                starttime=None,
                endtime=None,
                created_at=now_utc,
            ),
        )

    logger.info("game_created", game_id=game.id, quiz_id=quiz_id, duration_seconds=duration)
    return build_game_snapshot(game)


async def start_game(
    session: AsyncSession,
    *,
    actor_user_id: int,
    game_id: int,
    now_utc: datetime,
) -> GameStartResult:
    game = await require_game_owner(session, user_id=actor_user_id, game_id=game_id, action="start")

    with storage_guard("start_game", game_id=game_id):
        started_now = await GameSessionsRepo.set_starttime_if_missing(
            session,
            game_id=game_id,
            starttime=now_utc,
        )
        await session.refresh(game)

    snapshot = build_game_snapshot(game)
    if started_now:
        logger.info("game_started", game_id=game_id, starttime=snapshot.starttime)
    else:
        logger.info("game_start_replayed", game_id=game_id, starttime=snapshot.starttime)
    return GameStartResult(
        snapshot=snapshot,
        previous_starttime=None if started_now else snapshot.starttime,
        started_now=started_now,
    )


async def stop_game(
    session: AsyncSession,
    *,
    actor_user_id: int,
    game_id: int,
    now_utc: datetime,
) -> GameStopResult:
    game = await require_game_member(session, user_id=actor_user_id, game_id=game_id, action="stop")
    starttime = ensure_utc(game.starttime)
    if starttime is None:
        raise GameNotStartedError

    deadline = calc_endtime(starttime=starttime, duration_seconds=game.duration_seconds)
    endtime = min(now_utc, deadline)

    with storage_guard("stop_game", game_id=game_id):
        stopped_now = await GameSessionsRepo.set_endtime_if_missing(
            session,
            game_id=game_id,
            endtime=endtime,
        )
        await session.refresh(game)

    snapshot = build_game_snapshot(game)
    if stopped_now:
        logger.info("game_stopped", game_id=game_id, endtime=snapshot.endtime, stopped_by=actor_user_id)
    return GameStopResult(
        snapshot=snapshot,
        previous_endtime=None if stopped_now else snapshot.endtime,
        stopped_now=stopped_now,
    )


async def remove_game(
    session: AsyncSession,
    *,
    actor_user_id: int,
    game_id: int,
) -> None:
    game = await require_game_owner(session, user_id=actor_user_id, game_id=game_id, action="remove")

    with storage_guard("remove_game", game_id=game_id):
        await QuestionPerformancesRepo.delete_for_game(session, game_id=game_id)
        members_removed = await GameMembersRepo.delete_for_game(session, game_id=game_id)
        await GameSessionsRepo.delete(session, game=game)

    logger.info("game_removed", game_id=game_id, members_removed=members_removed)


async def has_game_started(session: AsyncSession, *, game_id: int) -> bool:
    game = await GameSessionsRepo.get_by_id(session, game_id)
    if game is None:
        return False
    return game.starttime is not None
