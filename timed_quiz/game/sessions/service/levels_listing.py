from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.db.models.levels import Level
from timed_quiz.db.repo.levels_repo import LevelsRepo
from timed_quiz.db.repo.session_questions_repo import SessionQuestionsRepo
from timed_quiz.game.levels.types import LevelView

from .common import load_game, load_owned_session


async def list_levels(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    session_id: UUID | None = None,
) -> list[LevelView]:
    """Active levels of the game.

    With a session id the levels follow that session's fixed order (levels
    deleted since the session started are skipped) and carry the session's
    question for each level, if one was started.
    """
    await load_game(session, game_id=game_id)
    levels = await LevelsRepo.list_active_for_game(session, game_id=game_id)
    if session_id is None:
        return [LevelView.from_model(level) for level in levels]

    game_session = await load_owned_session(
        session,
        game_id=game_id,
        user_id=user_id,
        session_id=session_id,
    )
    levels_by_id: dict[int, Level] = {level.id: level for level in levels}
    ordered = [
        levels_by_id[level_id] for level_id in game_session.level_ids if level_id in levels_by_id
    ]
    questions = await SessionQuestionsRepo.list_for_session(session, session_id=game_session.id)
    questions_by_level = {question.level_id: question for question in questions}
    return [
        LevelView.from_model(level, question=questions_by_level.get(level.id)) for level in ordered
    ]
