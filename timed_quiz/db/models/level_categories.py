from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from timed_quiz.db.models.base import Base


class LevelCategory(Base):
    __tablename__ = "level_categories"
    __table_args__ = (Index("idx_level_categories_level", "level_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    level_id: Mapped[int] = mapped_column(Integer, ForeignKey("levels.id"), nullable=False)
    bank_category_ref: Mapped[str] = mapped_column(String(64), nullable=False)
    include_subcategories: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
