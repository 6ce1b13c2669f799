from __future__ import annotations

import random
from datetime import datetime
from uuid import uuid4

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.core.clock import resolve_rng
from timed_quiz.core.config import get_settings
from timed_quiz.db.models.game_sessions import (
    LEVELS_ORDER_SEPARATOR,
    SESSION_STATE_DUMPED,
    SESSION_STATE_PROGRESS,
    GameSession,
)
from timed_quiz.db.models.games import Game
from timed_quiz.db.repo.game_sessions_repo import GameSessionsRepo
from timed_quiz.db.repo.levels_repo import LevelsRepo
from timed_quiz.db.repo.versioning import flush_versioned
from timed_quiz.game.errors import ConcurrentUpdateError
from timed_quiz.game.sessions.types import GameSessionView

from .common import load_game

logger = structlog.get_logger(__name__)


async def _dump_sessions(
    session: AsyncSession,
    running: list[GameSession],
    *,
    game_id: int,
    user_id: int,
    now_utc: datetime,
) -> None:
    for game_session in running:
        game_session.state = SESSION_STATE_DUMPED
        game_session.updated_at = now_utc
    await flush_versioned(session)
    logger.info(
        "game_sessions_dumped",
        game_id=game_id,
        user_id=user_id,
        session_ids=[str(game_session.id) for game_session in running],
    )


async def _build_levels_order(
    session: AsyncSession,
    *,
    game: Game,
    rng: random.Random,
) -> str:
    levels = await LevelsRepo.list_active_for_game(session, game_id=game.id)
    level_ids = [level.id for level in levels]
    if game.shuffle_levels:
        rng.shuffle(level_ids)
    return LEVELS_ORDER_SEPARATOR.join(str(level_id) for level_id in level_ids)


async def _insert_session(
    session: AsyncSession,
    *,
    game: Game,
    user_id: int,
    now_utc: datetime,
    rng: random.Random,
    max_attempts: int | None,
    resume_running: bool = False,
) -> GameSession:
    """Inserts a PROGRESS session, retrying on unique-index collisions.

    Running sessions are re-read under lock inside each attempt. They are
    dumped, or with ``resume_running`` the latest one is returned instead.
    """
    attempts = max_attempts if max_attempts is not None else get_settings().session_create_max_attempts
    levels_order = await _build_levels_order(session, game=game, rng=rng)

    for attempt in range(1, attempts + 1):
        try:
            async with session.begin_nested():
                running = await GameSessionsRepo.list_in_progress_for_update(
                    session,
                    game_id=game.id,
                    user_id=user_id,
                )
                if running and resume_running:
                    resumed = running[-1]
                    logger.info(
                        "game_session_resumed_concurrent",
                        game_id=game.id,
                        user_id=user_id,
                        session_id=str(resumed.id),
                    )
                    return resumed
                if running:
                    await _dump_sessions(
                        session,
                        running,
                        game_id=game.id,
                        user_id=user_id,
                        now_utc=now_utc,
                    )
                created = await GameSessionsRepo.create(
                    session,
                    game_session=GameSession(
                        id=uuid4(),
                        game_id=game.id,
                        user_id=user_id,
                        levels_order=levels_order,
                        score=0,
                        answers_total=0,
                        answers_correct=0,
                        state=SESSION_STATE_PROGRESS,
                        created_at=now_utc,
                        updated_at=now_utc,
                    ),
                )
        except IntegrityError as exc:
            # another request inserted a PROGRESS session between our read and insert
            logger.warning(
                "game_session_create_conflict",
                game_id=game.id,
                user_id=user_id,
                attempt=attempt,
            )
            if attempt >= attempts:
                raise ConcurrentUpdateError(
                    f"could not create a game session for user {user_id} in game {game.id}"
                ) from exc
            continue

        logger.info(
            "game_session_created",
            game_id=game.id,
            user_id=user_id,
            session_id=str(created.id),
            levels_count=len(created.level_ids),
        )
        return created

    raise ConcurrentUpdateError(f"no attempt left to create a game session in game {game.id}")


async def create_session(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    now_utc: datetime,
    rng: random.Random | None = None,
    max_attempts: int | None = None,
) -> GameSessionView:
    game = await load_game(session, game_id=game_id)
    created = await _insert_session(
        session,
        game=game,
        user_id=user_id,
        now_utc=now_utc,
        rng=resolve_rng(rng),
        max_attempts=max_attempts,
    )
    return GameSessionView.from_model(created)


async def get_or_create_session(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    now_utc: datetime,
    rng: random.Random | None = None,
) -> GameSessionView:
    game = await load_game(session, game_id=game_id)
    existing = await GameSessionsRepo.get_latest_resumable(
        session,
        game_id=game_id,
        user_id=user_id,
    )
    if existing is not None:
        return GameSessionView.from_model(existing)

    created = await _insert_session(
        session,
        game=game,
        user_id=user_id,
        now_utc=now_utc,
        rng=resolve_rng(rng),
        max_attempts=None,
        resume_running=True,
    )
    return GameSessionView.from_model(created)
