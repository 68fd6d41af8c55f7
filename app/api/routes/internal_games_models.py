from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class GameCreateRequest(BaseModel):
    quiz_id: int = Field(gt=0)
    name: str = Field(min_length=1, max_length=128)
    duration_seconds: int | None = Field(default=None, gt=0)
    duration: str | None = Field(default=None, min_length=5, max_length=9)

    @model_validator(mode="after")
    def _require_duration(self) -> GameCreateRequest:
        if self.duration_seconds is None and self.duration is None:
            raise ValueError("duration_seconds or duration is required")
        return self


class GameResponse(_FromAttributes):
    game_id: int
    quiz_id: int
    name: str
    duration_seconds: int
    starttime: datetime | None = None
    endtime: datetime | None = None
    calc_endtime: datetime | None = None
    created_at: datetime


class GameStartResponse(BaseModel):
    game: GameResponse
    previous_starttime: datetime | None = None
    started_now: bool


class GameStopResponse(BaseModel):
    game: GameResponse
    previous_endtime: datetime | None = None
    stopped_now: bool


class GameJoinResponse(_FromAttributes):
    game_id: int
    user_id: int
    joined_now: bool
    members_total: int = Field(ge=0)


class GameLeaveResponse(BaseModel):
    game_id: int
    user_id: int
    left_now: bool


class GameMemberResponse(_FromAttributes):
    user_id: int
    username: str
    joined_at: datetime


class GamePermissionResponse(BaseModel):
    game_id: int
    user_id: int
    permission: str


class GameListItemResponse(_FromAttributes):
    game_id: int
    name: str
    members: int = Field(ge=0)
    starttime: datetime | None = None
    duration_seconds: int
    calc_endtime: datetime | None = None
    owner_username: str | None = None


class GameInfoResponse(_FromAttributes):
    game_id: int
    gamename: str
    created_at: datetime
    starttime: datetime | None = None
    endtime: datetime | None = None
    duration_seconds: int
    calc_endtime: datetime | None = None
    quiz_id: int
    owner_id: int
    quizname: str
    quiz_created_at: datetime


class QuestionDetailResponse(_FromAttributes):
    question_id: int
    questiontext: str
    answered_total: int = Field(ge=0)
    answered_correct: int = Field(ge=0)
    answered_wrong: int = Field(ge=0)
    weight: int = Field(gt=0)


class GameProgressResponse(_FromAttributes):
    game_id: int
    user_id: int
    answered_count: int = Field(ge=0)
    question_ids: list[int]


class AnswerRequest(BaseModel):
    question_id: int = Field(gt=0)
    question_correct: int = Field(ge=0, le=100)


class AnswerResponse(_FromAttributes):
    game_id: int
    user_id: int
    question_id: int
    question_correct: int
    recorded_now: bool


class LeaderboardRowResponse(_FromAttributes):
    rank: int = Field(ge=1)
    user_id: int
    username: str
    questions_answered: int | None = None
    questions_answered_correct: int | None = None
    questions_answered_count: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    total_time_seconds: int | None = None
    time_per_question: float | None = None
    user_endtime: datetime | None = None
    starttime: datetime | None = None
    endtime: datetime | None = None


class GameReportResponse(BaseModel):
    game_id: int
    generated_at: datetime
    rows: list[LeaderboardRowResponse]


class AchievementEvaluateRequest(BaseModel):
    event_name: str = Field(min_length=1, max_length=64)
    user_id: int = Field(gt=0)
    codes: list[str] = Field(min_length=1, max_length=16)
    payload: dict[str, int | str] = Field(default_factory=dict)


class AchievementEvaluateResponse(BaseModel):
    user_id: int
    granted: list[str]
