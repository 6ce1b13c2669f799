from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.db.models.session_questions import SessionQuestion


class SessionQuestionsRepo:
    @staticmethod
    async def get_by_id_for_update(
        session: AsyncSession,
        question_id: UUID,
    ) -> SessionQuestion | None:
        stmt = (
            select(SessionQuestion)
            .where(SessionQuestion.id == question_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_session_level(
        session: AsyncSession,
        *,
        session_id: UUID,
        level_id: int,
    ) -> SessionQuestion | None:
        stmt = select(SessionQuestion).where(
            SessionQuestion.session_id == session_id,
            SessionQuestion.level_id == level_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_session(
        session: AsyncSession,
        *,
        session_id: UUID,
    ) -> list[SessionQuestion]:
        stmt = (
            select(SessionQuestion)
            .where(SessionQuestion.session_id == session_id)
            .order_by(SessionQuestion.created_at.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create_in_savepoint(
        session: AsyncSession,
        *,
        question: SessionQuestion,
    ) -> SessionQuestion:
        """Inserts inside a savepoint so a unique-key collision leaves the outer
        transaction usable. Raises IntegrityError on collision."""
        async with session.begin_nested():
            session.add(question)
            await session.flush()
        return question
