from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.db.models.game_sessions import GameSession
from timed_quiz.db.models.games import Game
from timed_quiz.db.models.levels import Level
from timed_quiz.db.models.session_questions import SessionQuestion
from timed_quiz.db.repo.game_sessions_repo import GameSessionsRepo
from timed_quiz.db.repo.games_repo import GamesRepo
from timed_quiz.db.repo.levels_repo import LevelsRepo
from timed_quiz.game.errors import AccessDeniedError, InvalidReferenceError


async def load_game(session: AsyncSession, *, game_id: int) -> Game:
    game = await GamesRepo.get_by_id(session, game_id)
    if game is None:
        raise InvalidReferenceError(f"game {game_id} does not exist")
    return game


def validate_session_ownership(game_session: GameSession, *, game_id: int, user_id: int) -> None:
    if game_session.game_id != game_id:
        raise AccessDeniedError(
            f"game session {game_session.id} doesn't belong to game {game_id}"
        )
    if game_session.user_id != user_id:
        raise AccessDeniedError(
            f"game session {game_session.id} doesn't belong to user {user_id}"
        )


def validate_question_in_session(question: SessionQuestion, *, game_session: GameSession) -> None:
    if question.session_id != game_session.id:
        raise InvalidReferenceError(
            f"question {question.id} doesn't belong to game session {game_session.id}"
        )


def validate_level_in_game(level: Level, *, game_id: int) -> None:
    if level.game_id != game_id:
        raise InvalidReferenceError(f"level {level.id} doesn't belong to game {game_id}")


async def load_owned_session(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    session_id: UUID,
    for_update: bool = False,
) -> GameSession:
    if for_update:
        game_session = await GameSessionsRepo.get_by_id_for_update(session, session_id)
    else:
        game_session = await GameSessionsRepo.get_by_id(session, session_id)
    if game_session is None:
        raise InvalidReferenceError(f"game session {session_id} does not exist")
    validate_session_ownership(game_session, game_id=game_id, user_id=user_id)
    return game_session


async def load_level(session: AsyncSession, *, game_id: int, level_id: int) -> Level:
    level = await LevelsRepo.get_by_id(session, level_id)
    if level is None:
        raise InvalidReferenceError(f"level {level_id} does not exist")
    validate_level_in_game(level, game_id=game_id)
    return level
