from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from timed_quiz.db.models.base import Base

ANSWERS_ORDER_SEPARATOR = ","


class SessionQuestion(Base):
    __tablename__ = "session_questions"
    __table_args__ = (
        UniqueConstraint("session_id", "level_id", name="uq_session_questions_session_level"),
        CheckConstraint("score >= 0", name="score_non_negative"),
        CheckConstraint("time_remaining >= 0", name="time_remaining_non_negative"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    session_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("game_sessions.id"),
        nullable=False,
    )
    level_id: Mapped[int] = mapped_column(Integer, ForeignKey("levels.id"), nullable=False)
    bank_question_ref: Mapped[str] = mapped_column(String(64), nullable=False)
    answers_order: Mapped[str] = mapped_column(Text, nullable=False)
    given_answer_ref: Mapped[str | None] = mapped_column(String(64), nullable=True)
    finished: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    time_remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def answer_refs(self) -> list[str]:
        if not self.answers_order:
            return []
        return self.answers_order.split(ANSWERS_ORDER_SEPARATOR)
