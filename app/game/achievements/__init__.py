from app.game.achievements.registry import ACHIEVEMENTS, evaluate_achievements, get_achievement
from app.game.achievements.types import Achievement, UserEvent

__all__ = [
    "ACHIEVEMENTS",
    "Achievement",
    "UserEvent",
    "evaluate_achievements",
    "get_achievement",
]
