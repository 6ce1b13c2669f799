from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.db.models.games import Game


class GamesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, game_id: int) -> Game | None:
        return await session.get(Game, game_id)

    @staticmethod
    async def create(session: AsyncSession, *, game: Game) -> Game:
        session.add(game)
        await session.flush()
        return game
