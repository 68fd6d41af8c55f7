from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CategorySnapshot:
    category_id: int
    name: str
    parent_id: int | None


@dataclass(slots=True)
class CategoryWithQuestionCount:
    category: CategorySnapshot
    question_count: int
