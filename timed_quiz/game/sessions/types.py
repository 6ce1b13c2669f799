from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from timed_quiz.db.models.game_sessions import GameSession


@dataclass(frozen=True, slots=True)
class GameSessionView:
    session_id: UUID
    game_id: int
    user_id: int
    score: int
    answers_total: int
    answers_correct: int
    state: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, game_session: GameSession) -> GameSessionView:
        return cls(
            session_id=game_session.id,
            game_id=game_session.game_id,
            user_id=game_session.user_id,
            score=game_session.score,
            answers_total=game_session.answers_total,
            answers_correct=game_session.answers_correct,
            state=game_session.state,
            created_at=game_session.created_at,
            updated_at=game_session.updated_at,
        )


@dataclass(frozen=True, slots=True)
class AnswerOptionView:
    answer_ref: str
    text: str


@dataclass(frozen=True, slots=True)
class SessionQuestionView:
    question_id: UUID
    session_id: UUID
    level_id: int
    bank_question_ref: str
    question_type: str
    text: str
    answers: tuple[AnswerOptionView, ...]
    given_answer_ref: str | None
    finished: bool
    correct: bool
    score: int
    time_remaining: int
    score_max: int
    time_max: int
    created_at: datetime
    updated_at: datetime
