from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.db.models.game_sessions import SESSION_STATE_DUMPED
from timed_quiz.db.repo.versioning import flush_versioned
from timed_quiz.game.sessions.types import GameSessionView

from .common import load_game, load_owned_session

logger = structlog.get_logger(__name__)


async def cancel_session(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    session_id: UUID,
    now_utc: datetime,
) -> GameSessionView:
    await load_game(session, game_id=game_id)
    game_session = await load_owned_session(
        session,
        game_id=game_id,
        user_id=user_id,
        session_id=session_id,
        for_update=True,
    )
    if not game_session.is_in_progress:
        return GameSessionView.from_model(game_session)

    game_session.state = SESSION_STATE_DUMPED
    game_session.updated_at = now_utc
    await flush_versioned(session)
    logger.info(
        "game_session_cancelled",
        game_id=game_id,
        user_id=user_id,
        session_id=str(game_session.id),
    )
    return GameSessionView.from_model(game_session)


async def get_session(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    session_id: UUID,
) -> GameSessionView:
    game_session = await load_owned_session(
        session,
        game_id=game_id,
        user_id=user_id,
        session_id=session_id,
    )
    return GameSessionView.from_model(game_session)
