from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base, BigIntPK


class GameSession(Base):
    __tablename__ = "game_sessions"
    __table_args__ = (
        CheckConstraint("duration_seconds > 0", name="ck_game_sessions_duration_positive"),
        CheckConstraint(
            "endtime IS NULL OR starttime IS NOT NULL",
            name="ck_game_sessions_endtime_requires_starttime",
        ),
        Index("idx_game_sessions_quiz", "quiz_id"),
        Index("idx_game_sessions_starttime_endtime", "starttime", "endtime"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    quiz_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    starttime: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    endtime: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
