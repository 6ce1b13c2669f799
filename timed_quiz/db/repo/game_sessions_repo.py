from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.db.models.game_sessions import (
    SESSION_STATE_FINISHED,
    SESSION_STATE_PROGRESS,
    GameSession,
)


class GameSessionsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, session_id: UUID) -> GameSession | None:
        return await session.get(GameSession, session_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, session_id: UUID) -> GameSession | None:
        stmt = (
            select(GameSession)
            .where(GameSession.id == session_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_in_progress_for_update(
        session: AsyncSession,
        *,
        game_id: int,
        user_id: int,
    ) -> list[GameSession]:
        stmt = (
            select(GameSession)
            .where(
                GameSession.game_id == game_id,
                GameSession.user_id == user_id,
                GameSession.state == SESSION_STATE_PROGRESS,
            )
            .order_by(GameSession.created_at.asc(), GameSession.id.asc())
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_latest_resumable(
        session: AsyncSession,
        *,
        game_id: int,
        user_id: int,
    ) -> GameSession | None:
        stmt = (
            select(GameSession)
            .where(
                GameSession.game_id == game_id,
                GameSession.user_id == user_id,
                GameSession.state.in_((SESSION_STATE_PROGRESS, SESSION_STATE_FINISHED)),
            )
            .order_by(GameSession.updated_at.desc(), GameSession.created_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, game_session: GameSession) -> GameSession:
        session.add(game_session)
        await session.flush()
        return game_session
