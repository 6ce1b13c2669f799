from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.db.models.levels import LEVEL_STATE_ACTIVE, Level


class LevelsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, level_id: int) -> Level | None:
        return await session.get(Level, level_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, level_id: int) -> Level | None:
        stmt = select(Level).where(Level.id == level_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_active_for_game(
        session: AsyncSession,
        *,
        game_id: int,
        for_update: bool = False,
    ) -> list[Level]:
        stmt = (
            select(Level)
            .where(Level.game_id == game_id, Level.state == LEVEL_STATE_ACTIVE)
            .order_by(Level.position.asc(), Level.id.asc())
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_active_by_position_for_update(
        session: AsyncSession,
        *,
        game_id: int,
        position: int,
    ) -> Level | None:
        stmt = (
            select(Level)
            .where(
                Level.game_id == game_id,
                Level.state == LEVEL_STATE_ACTIVE,
                Level.position == position,
            )
            .order_by(Level.id.asc())
            .limit(1)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def count_active_for_game(session: AsyncSession, *, game_id: int) -> int:
        stmt = select(func.count(Level.id)).where(
            Level.game_id == game_id,
            Level.state == LEVEL_STATE_ACTIVE,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def create(session: AsyncSession, *, level: Level) -> Level:
        session.add(level)
        await session.flush()
        return level
