from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class GamePermission(str, Enum):
    OWNER = "OWNER"
    NOT_OWNER = "NOT_OWNER"
    NOT_FOUND = "NOT_FOUND"

    @property
    def allows_modification(self) -> bool:
        return self is GamePermission.OWNER


@dataclass(slots=True)
class GameSnapshot:
    game_id: int
    quiz_id: int
    name: str
    duration_seconds: int
    starttime: datetime | None
    endtime: datetime | None
    created_at: datetime

    @property
    def calc_endtime(self) -> datetime | None:
        if self.starttime is None:
            return None
        return self.starttime + timedelta(seconds=self.duration_seconds)


@dataclass(slots=True)
class GameStartResult:
    snapshot: GameSnapshot
    previous_starttime: datetime | None
    started_now: bool


@dataclass(slots=True)
class GameStopResult:
    snapshot: GameSnapshot
    previous_endtime: datetime | None
    stopped_now: bool


@dataclass(slots=True)
class GameJoinResult:
    game_id: int
    user_id: int
    joined_now: bool
    members_total: int


@dataclass(slots=True)
class GameMemberSnapshot:
    user_id: int
    username: str
    joined_at: datetime


@dataclass(slots=True)
class GameListItem:
    game_id: int
    name: str
    members: int
    starttime: datetime | None
    duration_seconds: int
    calc_endtime: datetime | None
    owner_username: str | None = None


@dataclass(slots=True)
class GameInfoSnapshot:
    game_id: int
    gamename: str
    created_at: datetime
    starttime: datetime | None
    endtime: datetime | None
    duration_seconds: int
    calc_endtime: datetime | None
    quiz_id: int
    owner_id: int
    quizname: str
    quiz_created_at: datetime


@dataclass(slots=True)
class QuestionDetail:
    question_id: int
    questiontext: str
    answered_total: int
    answered_correct: int
    answered_wrong: int
    weight: int


@dataclass(slots=True)
class GameProgress:
    game_id: int
    user_id: int
    answered_count: int
    question_ids: tuple[int, ...]


@dataclass(slots=True)
class AnswerRecordResult:
    game_id: int
    user_id: int
    question_id: int
    question_correct: int
    recorded_now: bool


@dataclass(slots=True)
class MemberAggregate:
    user_id: int
    username: str
    answered_count: int
    answered_weight: int
    correct_weight: int
    user_endtime: datetime | None


@dataclass(slots=True)
class LeaderboardRow:
    rank: int
    user_id: int
    username: str
    questions_answered: int | None
    questions_answered_correct: int | None
    questions_answered_count: int
    total_questions: int
    total_time_seconds: int | None
    time_per_question: float | None
    user_endtime: datetime | None
    starttime: datetime | None
    endtime: datetime | None
