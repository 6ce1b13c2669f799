from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from timed_quiz.db.models.level_categories import LevelCategory
from timed_quiz.db.models.levels import Level
from timed_quiz.db.models.session_questions import SessionQuestion


@dataclass(frozen=True, slots=True)
class LevelQuestionSummary:
    question_id: UUID
    finished: bool
    correct: bool
    score: int
    time_remaining: int

    @classmethod
    def from_model(cls, question: SessionQuestion) -> LevelQuestionSummary:
        return cls(
            question_id=question.id,
            finished=question.finished,
            correct=question.correct,
            score=question.score,
            time_remaining=question.time_remaining,
        )


@dataclass(frozen=True, slots=True)
class LevelView:
    level_id: int
    game_id: int
    position: int
    name: str
    bgcolor: str
    image: str | None
    state: str
    question: LevelQuestionSummary | None = None

    @classmethod
    def from_model(cls, level: Level, *, question: SessionQuestion | None = None) -> LevelView:
        return cls(
            level_id=level.id,
            game_id=level.game_id,
            position=level.position,
            name=level.name,
            bgcolor=level.bgcolor,
            image=level.image,
            state=level.state,
            question=LevelQuestionSummary.from_model(question) if question is not None else None,
        )


@dataclass(frozen=True, slots=True)
class LevelCategoryView:
    category_id: int
    level_id: int
    bank_category_ref: str
    include_subcategories: bool

    @classmethod
    def from_model(cls, category: LevelCategory) -> LevelCategoryView:
        return cls(
            category_id=category.id,
            level_id=category.level_id,
            bank_category_ref=category.bank_category_ref,
            include_subcategories=category.include_subcategories,
        )


@dataclass(frozen=True, slots=True)
class SaveLevelResult:
    level_id: int
    created: bool
    success: bool = True
