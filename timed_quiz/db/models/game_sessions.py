from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from timed_quiz.db.models.base import Base

SESSION_STATE_PROGRESS = "PROGRESS"
SESSION_STATE_FINISHED = "FINISHED"
SESSION_STATE_DUMPED = "DUMPED"

LEVELS_ORDER_SEPARATOR = ","


class GameSession(Base):
    __tablename__ = "game_sessions"
    __table_args__ = (
        CheckConstraint("state IN ('PROGRESS','FINISHED','DUMPED')", name="state"),
        CheckConstraint("score >= 0", name="score_non_negative"),
        CheckConstraint(
            "answers_correct >= 0 AND answers_correct <= answers_total",
            name="answers_counters",
        ),
        Index("idx_game_sessions_game_user_updated", "game_id", "user_id", "updated_at"),
        Index(
            "uq_game_sessions_progress_game_user",
            "game_id",
            "user_id",
            unique=True,
            postgresql_where=text("state = 'PROGRESS'"),
            sqlite_where=text("state = 'PROGRESS'"),
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("games.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    levels_order: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    answers_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    answers_correct: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    state: Mapped[str] = mapped_column(String(16), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_in_progress(self) -> bool:
        return self.state == SESSION_STATE_PROGRESS

    @property
    def level_ids(self) -> list[int]:
        if not self.levels_order:
            return []
        return [int(level_id) for level_id in self.levels_order.split(LEVELS_ORDER_SEPARATOR)]
