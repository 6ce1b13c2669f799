from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from timed_quiz.db.models.base import Base

LEVEL_STATE_ACTIVE = "ACTIVE"
LEVEL_STATE_DELETED = "DELETED"


class Level(Base):
    __tablename__ = "levels"
    __table_args__ = (
        CheckConstraint("state IN ('ACTIVE','DELETED')", name="state"),
        CheckConstraint("position >= 0", name="position_non_negative"),
        Index("idx_levels_game_state_position", "game_id", "state", "position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("games.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    bgcolor: Mapped[str] = mapped_column(String(32), nullable=False)
    image: Mapped[str | None] = mapped_column(String(255), nullable=True)
    state: Mapped[str] = mapped_column(String(16), nullable=False, default=LEVEL_STATE_ACTIVE)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_active(self) -> bool:
        return self.state == LEVEL_STATE_ACTIVE
