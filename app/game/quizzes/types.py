from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from app.game.sessions.types import GameListItem


class QuizPermission(str, Enum):
    OWNER = "OWNER"
    NOT_OWNER = "NOT_OWNER"
    NOT_FOUND = "NOT_FOUND"


@dataclass(slots=True)
class QuizSnapshot:
    quiz_id: int
    user_id: int
    name: str
    created_at: datetime


@dataclass(slots=True)
class QuestionSnapshot:
    question_id: int
    user_id: int
    category_id: int
    questiontext: str
    created_at: datetime


@dataclass(slots=True)
class QuizQuestionLinkResult:
    quiz_id: int
    question_id: int
    weight: int
    added_now: bool


@dataclass(slots=True)
class UserContentSnapshot:
    user_id: int
    questions: tuple[QuestionSnapshot, ...]
    quizzes: tuple[QuizSnapshot, ...]
    games: tuple[GameListItem, ...]
