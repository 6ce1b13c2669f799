from timed_quiz.db.models.game_sessions import GameSession
from timed_quiz.db.models.games import Game
from timed_quiz.db.models.level_categories import LevelCategory
from timed_quiz.db.models.levels import Level
from timed_quiz.db.models.session_questions import SessionQuestion

__all__ = [
    "Game",
    "GameSession",
    "Level",
    "LevelCategory",
    "SessionQuestion",
]
