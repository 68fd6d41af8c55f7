from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.api.routes.internal_games_models import GameListItemResponse


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    parent_id: int | None = Field(default=None, gt=0)


class CategoryResponse(_FromAttributes):
    category_id: int
    name: str
    parent_id: int | None = None


class CategoryWithCountResponse(CategoryResponse):
    question_count: int = Field(ge=0)


class CategoryTrueChildResponse(BaseModel):
    category_id: int
    is_true_child: bool


class QuestionCountResponse(BaseModel):
    question_count: int = Field(ge=0)


class QuizCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=128)


class QuizResponse(_FromAttributes):
    quiz_id: int
    user_id: int
    name: str
    created_at: datetime


class QuestionCreateRequest(BaseModel):
    category_id: int = Field(gt=0)
    questiontext: str = Field(min_length=1, max_length=4000)


class QuestionResponse(_FromAttributes):
    question_id: int
    user_id: int
    category_id: int
    questiontext: str
    created_at: datetime


class QuizQuestionAddRequest(BaseModel):
    question_id: int = Field(gt=0)
    weight: int = Field(default=1, gt=0, le=100)


class QuizQuestionAddResponse(_FromAttributes):
    quiz_id: int
    question_id: int
    weight: int
    added_now: bool


class UserContentResponse(BaseModel):
    user_id: int
    questions: list[QuestionResponse]
    quizzes: list[QuizResponse]
    games: list[GameListItemResponse]


class UserCreateRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    is_superuser: bool = False


class UserResponse(BaseModel):
    user_id: int
    username: str
    is_superuser: bool
    created_at: datetime
