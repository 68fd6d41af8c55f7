from app.db.repo.categories_repo import CategoriesRepo
from app.db.repo.game_members_repo import GameMembersRepo
from app.db.repo.game_sessions_repo import GameSessionsRepo
from app.db.repo.question_performances_repo import QuestionPerformancesRepo
from app.db.repo.questions_repo import QuestionsRepo
from app.db.repo.quizzes_repo import QuizzesRepo
from app.db.repo.users_repo import UsersRepo

__all__ = [
    "CategoriesRepo",
    "GameMembersRepo",
    "GameSessionsRepo",
    "QuestionPerformancesRepo",
    "QuestionsRepo",
    "QuizzesRepo",
    "UsersRepo",
]
