"""Game report: per-member aggregates ranked by correct weight, then speed."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.game_sessions_repo import GameSessionsRepo
from app.db.repo.question_performances_repo import QuestionPerformancesRepo
from app.db.repo.quizzes_repo import QuizzesRepo
from app.game.sessions.errors import GameNotFoundError
from app.game.sessions.internal import calc_endtime, ensure_utc
from app.game.sessions.types import LeaderboardRow, MemberAggregate


def resolve_effective_endtime(
    *,
    starttime: datetime | None,
    endtime: datetime | None,
    duration_seconds: int,
    now_utc: datetime,
) -> datetime | None:
    """Return when the game ended, or None while it is still running.

    A stored endtime is capped at starttime+duration; a game whose duration
    has elapsed counts as ended even if nobody stopped it.
    """
    deadline = calc_endtime(starttime=starttime, duration_seconds=duration_seconds)
    if deadline is None:
        return None
    if endtime is not None:
        return min(endtime, deadline)
    if now_utc >= deadline:
        return deadline
    return None


def _elapsed_seconds(*, starttime: datetime, until: datetime | None) -> int | None:
    if until is None:
        return None
    return max(0, int((until - starttime).total_seconds()))


def _member_total_time(
    member: MemberAggregate,
    *,
    total_questions: int,
    starttime: datetime | None,
    effective_endtime: datetime | None,
    now_utc: datetime,
) -> int | None:
    if starttime is None:
        return None
    finished_all = total_questions > 0 and member.answered_weight >= total_questions
    if finished_all:
        return _elapsed_seconds(starttime=starttime, until=member.user_endtime)
    if effective_endtime is not None:
        return _elapsed_seconds(starttime=starttime, until=effective_endtime)
    return _elapsed_seconds(starttime=starttime, until=now_utc)


def _rank_key(row: LeaderboardRow) -> tuple[int, bool, float, int]:
    correct = row.questions_answered_correct or 0
    time_per_question = row.time_per_question
    return (
        -correct,
        time_per_question is None,
        time_per_question if time_per_question is not None else 0.0,
        row.user_id,
    )


def rank_members(
    members: Iterable[MemberAggregate],
    *,
    total_questions: int,
    starttime: datetime | None,
    endtime: datetime | None,
    duration_seconds: int,
    now_utc: datetime,
) -> list[LeaderboardRow]:
    effective_endtime = resolve_effective_endtime(
        starttime=starttime,
        endtime=endtime,
        duration_seconds=duration_seconds,
        now_utc=now_utc,
    )
    rows: list[LeaderboardRow] = []
    for member in members:
        answered = member.answered_count > 0
        total_time = _member_total_time(
            member,
            total_questions=total_questions,
            starttime=starttime,
            effective_endtime=effective_endtime,
            now_utc=now_utc,
        )
        time_per_question: float | None = None
        if answered and total_time is not None:
            time_per_question = total_time / member.answered_count
        rows.append(
            LeaderboardRow(
                rank=0,
                user_id=member.user_id,
                username=member.username,
                questions_answered=member.answered_weight if answered else None,
                questions_answered_correct=member.correct_weight if answered else None,
                questions_answered_count=member.answered_count,
                total_questions=total_questions,
                total_time_seconds=total_time,
                time_per_question=time_per_question,
                user_endtime=member.user_endtime,
                starttime=starttime,
                endtime=effective_endtime,
            )
        )

    rows.sort(key=_rank_key)
    for position, row in enumerate(rows, start=1):
        row.rank = position
    return rows


async def build_game_report(
    session: AsyncSession,
    *,
    game_id: int,
    now_utc: datetime,
) -> list[LeaderboardRow]:
    game = await GameSessionsRepo.get_by_id(session, game_id)
    if game is None:
        raise GameNotFoundError

    total_questions = await QuizzesRepo.sum_weights(session, quiz_id=game.quiz_id)
    aggregates = await QuestionPerformancesRepo.aggregate_members_for_game(session, game_id=game_id)
    members = [
        MemberAggregate(
            user_id=int(row["user_id"]),
            username=str(row["username"]),
            answered_count=int(row["answered_count"] or 0),
            answered_weight=int(row["answered_weight"] or 0),
            correct_weight=int(row["correct_weight"] or 0),
            user_endtime=ensure_utc(row["user_endtime"]),
        )
        for row in aggregates
    ]
    return rank_members(
        members,
        total_questions=total_questions,
        starttime=ensure_utc(game.starttime),
        endtime=ensure_utc(game.endtime),
        duration_seconds=int(game.duration_seconds),
        now_utc=now_utc,
    )
