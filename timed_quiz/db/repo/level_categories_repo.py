from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.db.models.level_categories import LevelCategory


class LevelCategoriesRepo:
    @staticmethod
    async def list_for_level(session: AsyncSession, *, level_id: int) -> list[LevelCategory]:
        stmt = (
            select(LevelCategory)
            .where(LevelCategory.level_id == level_id)
            .order_by(LevelCategory.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(session: AsyncSession, *, category: LevelCategory) -> LevelCategory:
        session.add(category)
        await session.flush()
        return category

    @staticmethod
    async def delete(session: AsyncSession, *, category: LevelCategory) -> None:
        await session.delete(category)
        await session.flush()
