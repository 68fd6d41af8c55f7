from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class GameMember(Base):
    __tablename__ = "game_members"
    __table_args__ = (Index("idx_game_members_user", "user_id"),)

    gamesession_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("game_sessions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), primary_key=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
