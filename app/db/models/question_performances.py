from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    SmallInteger,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base, BigIntPK


class QuestionPerformance(Base):
    __tablename__ = "question_performances"
    __table_args__ = (
        CheckConstraint(
            "question_correct IN (0, 100)",
            name="ck_question_performances_correct_range",
        ),
        UniqueConstraint(
            "gamesession_id",
            "user_id",
            "question_id",
            name="uq_question_performances_game_user_question",
        ),
        Index("idx_question_performances_user_correct", "user_id", "question_correct"),
        Index("idx_question_performances_game_answered", "gamesession_id", "answered_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    gamesession_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("game_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    question_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
    )
    question_correct: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    answered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
