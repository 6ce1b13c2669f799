from timed_quiz.db.repo.game_sessions_repo import GameSessionsRepo
from timed_quiz.db.repo.games_repo import GamesRepo
from timed_quiz.db.repo.level_categories_repo import LevelCategoriesRepo
from timed_quiz.db.repo.levels_repo import LevelsRepo
from timed_quiz.db.repo.session_questions_repo import SessionQuestionsRepo
