from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.game_sessions_repo import GameSessionsRepo
from app.db.repo.question_performances_repo import QuestionPerformancesRepo
from app.db.repo.quizzes_repo import QuizzesRepo
from app.game.sessions.errors import GameNotFoundError
from app.game.sessions.internal import build_game_list_item, calc_endtime, ensure_utc
from app.game.sessions.types import GameInfoSnapshot, GameListItem, GameProgress, QuestionDetail


async def get_game_info(session: AsyncSession, *, game_id: int) -> GameInfoSnapshot:
    row = await GameSessionsRepo.get_info_row(session, game_id)
    if row is None:
        raise GameNotFoundError
    starttime = ensure_utc(row["starttime"])
    duration_seconds = int(row["duration_seconds"])
    return GameInfoSnapshot(
        game_id=int(row["game_id"]),
        gamename=str(row["gamename"]),
        created_at=ensure_utc(row["created_at"]),
        starttime=starttime,
        endtime=ensure_utc(row["endtime"]),
        duration_seconds=duration_seconds,
        calc_endtime=calc_endtime(starttime=starttime, duration_seconds=duration_seconds),
        quiz_id=int(row["quiz_id"]),
        owner_id=int(row["owner_id"]),
        quizname=str(row["quizname"]),
        quiz_created_at=ensure_utc(row["quiz_created_at"]),
    )


async def list_open_games(session: AsyncSession) -> list[GameListItem]:
    rows = await GameSessionsRepo.list_open_rows(session)
    return [build_game_list_item(row) for row in rows]


async def list_active_games(session: AsyncSession, *, user_id: int) -> list[GameListItem]:
    rows = await GameSessionsRepo.list_active_rows_for_user(session, user_id=user_id)
    return [build_game_list_item(row) for row in rows]


async def list_hosted_games(session: AsyncSession, *, user_id: int) -> list[GameListItem]:
    rows = await GameSessionsRepo.list_hosted_rows(session, user_id=user_id)
    return [build_game_list_item(row) for row in rows]


async def list_participated_games(session: AsyncSession, *, user_id: int) -> list[GameListItem]:
    rows = await GameSessionsRepo.list_participated_rows(session, user_id=user_id)
    return [build_game_list_item(row) for row in rows]


async def get_question_details(session: AsyncSession, *, game_id: int) -> list[QuestionDetail]:
    if await GameSessionsRepo.get_by_id(session, game_id) is None:
        raise GameNotFoundError
    rows = await QuestionPerformancesRepo.question_stats_for_game(session, game_id=game_id)
    return [
        QuestionDetail(
            question_id=int(row["question_id"]),
            questiontext=str(row["questiontext"]),
            answered_total=int(row["answered_total"] or 0),
            answered_correct=int(row["answered_correct"] or 0),
            answered_wrong=int(row["answered_wrong"] or 0),
            weight=int(row["weight"]),
        )
        for row in rows
    ]


async def get_game_progress(session: AsyncSession, *, user_id: int, game_id: int) -> GameProgress:
    """Restore a member's position: answers given so far and the quiz's question order."""
    game = await GameSessionsRepo.get_by_id(session, game_id)
    if game is None:
        raise GameNotFoundError
    answered_count = await QuestionPerformancesRepo.count_for_user_in_game(
        session,
        game_id=game_id,
        user_id=user_id,
    )
    question_ids = await QuizzesRepo.list_question_ids(session, quiz_id=game.quiz_id)
    return GameProgress(
        game_id=game_id,
        user_id=user_id,
        answered_count=answered_count,
        question_ids=tuple(question_ids),
    )
