from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from timed_quiz.db.models.base import Base


class Game(Base):
    __tablename__ = "games"
    __table_args__ = (
        CheckConstraint("question_duration > 0", name="question_duration_positive"),
        CheckConstraint(
            "expected_words_per_minute > 0",
            name="expected_words_per_minute_positive",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    question_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    expected_words_per_minute: Mapped[int] = mapped_column(Integer, nullable=False, default=120)
    shuffle_levels: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    shuffle_answers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
