from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.game_sessions import GameSession
from app.db.repo.game_members_repo import GameMembersRepo
from app.db.repo.game_sessions_repo import GameSessionsRepo
from app.game.sessions.errors import GameNotFoundError, GameUnauthorizedError
from app.game.sessions.types import GamePermission

logger = structlog.get_logger(__name__)


async def check_game_permission(
    session: AsyncSession,
    *,
    user_id: int,
    game_id: int,
) -> GamePermission:
    owner_user_id = await GameSessionsRepo.get_owner_user_id(session, game_id)
    if owner_user_id is None:
        return GamePermission.NOT_FOUND
    if owner_user_id == user_id:
        return GamePermission.OWNER
    return GamePermission.NOT_OWNER


async def require_game_owner(
    session: AsyncSession,
    *,
    user_id: int,
    game_id: int,
    action: str,
) -> GameSession:
    permission = await check_game_permission(session, user_id=user_id, game_id=game_id)
    if permission is GamePermission.NOT_FOUND:
        logger.warning("game_action_denied", reason="not_found", action=action, game_id=game_id, user_id=user_id)
        raise GameNotFoundError
    if not permission.allows_modification:
        logger.warning("game_action_denied", reason="not_owner", action=action, game_id=game_id, user_id=user_id)
        raise GameUnauthorizedError

    game = await GameSessionsRepo.get_by_id(session, game_id)
    if game is None:
        raise GameNotFoundError
    return game


async def require_game_member(
    session: AsyncSession,
    *,
    user_id: int,
    game_id: int,
    action: str,
) -> GameSession:
    game = await GameSessionsRepo.get_by_id(session, game_id)
    if game is None:
        logger.warning("game_action_denied", reason="not_found", action=action, game_id=game_id, user_id=user_id)
        raise GameNotFoundError
    if not await GameMembersRepo.is_member(session, game_id=game_id, user_id=user_id):
        logger.warning("game_action_denied", reason="not_member", action=action, game_id=game_id, user_id=user_id)
        raise GameUnauthorizedError
    return game
