from __future__ import annotations

import random
from datetime import datetime
from uuid import UUID, uuid4

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.core.clock import resolve_rng
from timed_quiz.db.models.game_sessions import GameSession
from timed_quiz.db.models.games import Game
from timed_quiz.db.models.levels import Level
from timed_quiz.db.models.session_questions import ANSWERS_ORDER_SEPARATOR, SessionQuestion
from timed_quiz.db.repo.level_categories_repo import LevelCategoriesRepo
from timed_quiz.db.repo.session_questions_repo import SessionQuestionsRepo
from timed_quiz.game.errors import (
    InvalidReferenceError,
    NoQuestionAvailableError,
    SessionClosedError,
    UnsupportedQuestionError,
)
from timed_quiz.game.questions.source import QuestionSource
from timed_quiz.game.questions.types import CategoryFilter
from timed_quiz.game.sessions.types import SessionQuestionView

from .common import load_game, load_level, load_owned_session
from .question_views import build_question_view, load_bank_question

logger = structlog.get_logger(__name__)


async def _start_question(
    session: AsyncSession,
    *,
    game: Game,
    game_session: GameSession,
    level: Level,
    question_source: QuestionSource,
    now_utc: datetime,
    rng: random.Random,
) -> SessionQuestion:
    categories = await LevelCategoriesRepo.list_for_level(session, level_id=level.id)
    bank_question = await question_source.fetch_random_question(
        [
            CategoryFilter(
                category_ref=category.bank_category_ref,
                include_subcategories=category.include_subcategories,
            )
            for category in categories
        ],
        rng=rng,
    )
    if bank_question is None:
        raise NoQuestionAvailableError(f"no bank question matches the categories of level {level.id}")

    answer_refs = bank_question.answer_refs
    if any(ANSWERS_ORDER_SEPARATOR in answer_ref for answer_ref in answer_refs):
        raise UnsupportedQuestionError(
            f"bank question {bank_question.question_ref} has answer refs containing "
            f"{ANSWERS_ORDER_SEPARATOR!r}"
        )
    if game.shuffle_answers:
        rng.shuffle(answer_refs)

    question = SessionQuestion(
        id=uuid4(),
        session_id=game_session.id,
        level_id=level.id,
        bank_question_ref=bank_question.question_ref,
        answers_order=ANSWERS_ORDER_SEPARATOR.join(answer_refs),
        given_answer_ref=None,
        finished=False,
        correct=False,
        score=0,
        time_remaining=0,
        created_at=now_utc,
        updated_at=now_utc,
    )
    try:
        created = await SessionQuestionsRepo.create_in_savepoint(session, question=question)
    except IntegrityError:
        # a concurrent request started this level first; its row wins
        loaded = await SessionQuestionsRepo.get_by_session_level(
            session,
            session_id=game_session.id,
            level_id=level.id,
        )
        if loaded is None:
            raise
        logger.info(
            "session_question_create_race_lost",
            session_id=str(game_session.id),
            level_id=level.id,
            question_id=str(loaded.id),
        )
        return loaded

    logger.info(
        "session_question_created",
        session_id=str(game_session.id),
        level_id=level.id,
        question_id=str(created.id),
        bank_question_ref=created.bank_question_ref,
    )
    return created


async def get_or_create_question(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    session_id: UUID,
    level_id: int,
    question_source: QuestionSource,
    now_utc: datetime,
    rng: random.Random | None = None,
) -> SessionQuestionView:
    game = await load_game(session, game_id=game_id)
    game_session = await load_owned_session(
        session,
        game_id=game_id,
        user_id=user_id,
        session_id=session_id,
    )
    level = await load_level(session, game_id=game_id, level_id=level_id)

    question = await SessionQuestionsRepo.get_by_session_level(
        session,
        session_id=game_session.id,
        level_id=level.id,
    )
    if question is None:
        if not game_session.is_in_progress:
            raise SessionClosedError(f"game session {game_session.id} is {game_session.state}")
        if not level.is_active or level.id not in game_session.level_ids:
            raise InvalidReferenceError(
                f"level {level.id} is not part of game session {game_session.id}"
            )
        question = await _start_question(
            session,
            game=game,
            game_session=game_session,
            level=level,
            question_source=question_source,
            now_utc=now_utc,
            rng=resolve_rng(rng),
        )

    bank_question = await load_bank_question(question_source, question=question)
    return build_question_view(game=game, question=question, bank_question=bank_question)
