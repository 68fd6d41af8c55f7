from __future__ import annotations

from fastapi import HTTPException

from app.game.achievements.errors import (
    AchievementError,
    AchievementEventPayloadError,
    UnknownAchievementError,
)
from app.game.categories.errors import (
    CategoryError,
    CategoryInvalidInputError,
    CategoryNotFoundError,
    CategoryStorageError,
    CategoryUnauthorizedError,
)
from app.game.quizzes.errors import (
    QuizError,
    QuizInvalidInputError,
    QuizNotFoundError,
    QuizStorageError,
    QuizUnauthorizedError,
)
from app.game.sessions.errors import (
    GameError,
    GameInvalidInputError,
    GameNotFoundError,
    GameNotRunningError,
    GameNotStartedError,
    GameStorageError,
    GameUnauthorizedError,
)

_ERROR_RESPONSES: dict[type[Exception], tuple[int, str]] = {
    GameNotFoundError: (404, "E_GAME_NOT_FOUND"),
    GameUnauthorizedError: (403, "E_GAME_FORBIDDEN"),
    GameInvalidInputError: (422, "E_GAME_INVALID_INPUT"),
    GameNotStartedError: (409, "E_GAME_NOT_STARTED"),
    GameNotRunningError: (409, "E_GAME_NOT_RUNNING"),
    GameStorageError: (503, "E_GAME_STORAGE_UNAVAILABLE"),
    CategoryNotFoundError: (404, "E_CATEGORY_NOT_FOUND"),
    CategoryUnauthorizedError: (403, "E_CATEGORY_FORBIDDEN"),
    CategoryInvalidInputError: (422, "E_CATEGORY_INVALID_INPUT"),
    CategoryStorageError: (503, "E_CATEGORY_STORAGE_UNAVAILABLE"),
    QuizNotFoundError: (404, "E_QUIZ_NOT_FOUND"),
    QuizUnauthorizedError: (403, "E_QUIZ_FORBIDDEN"),
    QuizInvalidInputError: (422, "E_QUIZ_INVALID_INPUT"),
    QuizStorageError: (503, "E_QUIZ_STORAGE_UNAVAILABLE"),
    UnknownAchievementError: (422, "E_ACHIEVEMENT_UNKNOWN"),
    AchievementEventPayloadError: (422, "E_ACHIEVEMENT_PAYLOAD_INVALID"),
}

DomainError = (GameError, CategoryError, QuizError, AchievementError)
_INVALID_INPUT_ERRORS = (
    GameInvalidInputError,
    CategoryInvalidInputError,
    QuizInvalidInputError,
    AchievementEventPayloadError,
)


def to_http_exception(exc: Exception) -> HTTPException:
    for error_type in type(exc).__mro__:
        mapped = _ERROR_RESPONSES.get(error_type)
        if mapped is not None:
            status_code, code = mapped
            detail: dict[str, str] = {"code": code}
            if isinstance(exc, _INVALID_INPUT_ERRORS) and exc.args:
                detail["field"] = str(exc.args[0])
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=500, detail={"code": "E_INTERNAL"})
