from app.game.sessions.answers import record_answer
from app.game.sessions.leaderboard import build_game_report, rank_members
from app.game.sessions.lifecycle import (
    create_game,
    has_game_started,
    remove_game,
    start_game,
    stop_game,
)
from app.game.sessions.membership import (
    is_game_member,
    join_game,
    leave_game,
    list_game_members,
)
from app.game.sessions.permissions import check_game_permission
from app.game.sessions.queries import (
    get_game_info,
    get_game_progress,
    get_question_details,
    list_active_games,
    list_hosted_games,
    list_open_games,
    list_participated_games,
)

__all__ = [
    "build_game_report",
    "check_game_permission",
    "create_game",
    "get_game_info",
    "get_game_progress",
    "get_question_details",
    "has_game_started",
    "is_game_member",
    "join_game",
    "leave_game",
    "list_active_games",
    "list_game_members",
    "list_hosted_games",
    "list_open_games",
    "list_participated_games",
    "rank_members",
    "record_answer",
    "remove_game",
    "start_game",
    "stop_game",
]
