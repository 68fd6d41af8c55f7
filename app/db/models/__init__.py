from app.db.models.base import Base
from app.db.models.categories import Category
from app.db.models.game_members import GameMember
from app.db.models.game_sessions import GameSession
from app.db.models.question_performances import QuestionPerformance
from app.db.models.questions import Question
from app.db.models.quiz_questions import QuizQuestion
from app.db.models.quizzes import Quiz
from app.db.models.users import User

__all__ = [
    "Base",
    "Category",
    "GameMember",
    "GameSession",
    "Question",
    "QuestionPerformance",
    "Quiz",
    "QuizQuestion",
    "User",
]
