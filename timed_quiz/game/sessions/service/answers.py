from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.core.clock import elapsed_whole_seconds
from timed_quiz.db.models.game_sessions import SESSION_STATE_FINISHED, GameSession
from timed_quiz.db.models.games import Game
from timed_quiz.db.models.session_questions import SessionQuestion
from timed_quiz.db.repo.levels_repo import LevelsRepo
from timed_quiz.db.repo.session_questions_repo import SessionQuestionsRepo
from timed_quiz.db.repo.versioning import flush_versioned
from timed_quiz.game.collaborators import CompletionNotifier
from timed_quiz.game.errors import (
    AlreadyAnsweredError,
    InvalidReferenceError,
    SessionClosedError,
    ValidationFailedError,
)
from timed_quiz.game.questions.source import QuestionSource, resolve_single_correct_answer
from timed_quiz.game.questions.timing import remaining_time_seconds, score_for_answer
from timed_quiz.game.questions.types import BankQuestion
from timed_quiz.game.sessions.types import SessionQuestionView

from .common import load_game, load_owned_session, validate_question_in_session
from .question_views import build_question_view, load_bank_question, time_available_for

logger = structlog.get_logger(__name__)


async def _load_open_question(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    session_id: UUID,
    question_id: UUID,
) -> tuple[Game, GameSession, SessionQuestion]:
    game = await load_game(session, game_id=game_id)
    game_session = await load_owned_session(
        session,
        game_id=game_id,
        user_id=user_id,
        session_id=session_id,
        for_update=True,
    )
    if not game_session.is_in_progress:
        raise SessionClosedError(f"game session {game_session.id} is not available anymore")

    question = await SessionQuestionsRepo.get_by_id_for_update(session, question_id)
    if question is None:
        raise InvalidReferenceError(f"question {question_id} does not exist")
    validate_question_in_session(question, game_session=game_session)
    if question.finished:
        raise AlreadyAnsweredError(f"question {question.id} has already been answered")
    return game, game_session, question


async def _finalize_question(
    session: AsyncSession,
    *,
    game: Game,
    game_session: GameSession,
    question: SessionQuestion,
    bank_question: BankQuestion,
    given_answer_ref: str | None,
    correct: bool,
    now_utc: datetime,
    completion_notifier: CompletionNotifier | None,
) -> None:
    time_taken = elapsed_whole_seconds(started_at=question.created_at, now_utc=now_utc)
    time_remaining = remaining_time_seconds(
        time_available=time_available_for(game, bank_question),
        time_taken=time_taken,
    )

    question.given_answer_ref = given_answer_ref
    question.finished = True
    question.correct = correct
    question.time_remaining = time_remaining
    question.score = score_for_answer(
        correct=correct,
        time_remaining=time_remaining,
        question_duration=game.question_duration,
    )
    question.updated_at = now_utc
    await flush_versioned(session)

    game_session.answers_total += 1
    if question.correct:
        game_session.score += question.score
        game_session.answers_correct += 1
    active_levels = await LevelsRepo.count_active_for_game(session, game_id=game.id)
    finished_now = game_session.answers_total == active_levels
    if finished_now:
        game_session.state = SESSION_STATE_FINISHED
    game_session.updated_at = now_utc
    await flush_versioned(session)

    logger.info(
        "session_question_finished",
        session_id=str(game_session.id),
        question_id=str(question.id),
        correct=question.correct,
        answered=given_answer_ref is not None,
        score=question.score,
        time_taken=time_taken,
        time_remaining=time_remaining,
    )
    if not finished_now:
        return

    logger.info(
        "game_session_finished",
        game_id=game.id,
        user_id=game_session.user_id,
        session_id=str(game_session.id),
        score=game_session.score,
        answers_correct=game_session.answers_correct,
        answers_total=game_session.answers_total,
    )
    if completion_notifier is not None:
        await completion_notifier.notify_complete(user_id=game_session.user_id, game_id=game.id)


async def submit_answer(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    session_id: UUID,
    question_id: UUID,
    answer_ref: str,
    question_source: QuestionSource,
    now_utc: datetime,
    completion_notifier: CompletionNotifier | None = None,
) -> SessionQuestionView:
    game, game_session, question = await _load_open_question(
        session,
        game_id=game_id,
        user_id=user_id,
        session_id=session_id,
        question_id=question_id,
    )
    if answer_ref not in question.answer_refs:
        raise ValidationFailedError(f"answer {answer_ref} is not an option of question {question.id}")

    bank_question = await load_bank_question(question_source, question=question)
    correct_answer = resolve_single_correct_answer(bank_question)
    await _finalize_question(
        session,
        game=game,
        game_session=game_session,
        question=question,
        bank_question=bank_question,
        given_answer_ref=answer_ref,
        correct=correct_answer.answer_ref == answer_ref,
        now_utc=now_utc,
        completion_notifier=completion_notifier,
    )
    return build_question_view(game=game, question=question, bank_question=bank_question)


async def cancel_answer(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    session_id: UUID,
    question_id: UUID,
    question_source: QuestionSource,
    now_utc: datetime,
    completion_notifier: CompletionNotifier | None = None,
) -> SessionQuestionView:
    game, game_session, question = await _load_open_question(
        session,
        game_id=game_id,
        user_id=user_id,
        session_id=session_id,
        question_id=question_id,
    )
    bank_question = await load_bank_question(question_source, question=question)
    await _finalize_question(
        session,
        game=game,
        game_session=game_session,
        question=question,
        bank_question=bank_question,
        given_answer_ref=None,
        correct=False,
        now_utc=now_utc,
        completion_notifier=completion_notifier,
    )
    return build_question_view(game=game, question=question, bank_question=bank_question)
