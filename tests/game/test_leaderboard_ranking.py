from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.game.sessions.leaderboard import rank_members, resolve_effective_endtime
from app.game.sessions.types import MemberAggregate

UTC = timezone.utc
T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _member(
    user_id: int,
    username: str,
    *,
    answered: int = 0,
    correct: int = 0,
    last_answer_at: datetime | None = None,
    answered_weight: int | None = None,
) -> MemberAggregate:
    return MemberAggregate(
        user_id=user_id,
        username=username,
        answered_count=answered,
        answered_weight=answered if answered_weight is None else answered_weight,
        correct_weight=correct,
        user_endtime=last_answer_at,
    )


def test_accurate_player_outranks_slower_partial_player() -> None:
    rows = rank_members(
        [
            _member(2, "bob", answered=3, correct=3, last_answer_at=T0 + timedelta(minutes=6)),
            _member(1, "alice", answered=5, correct=5, last_answer_at=T0 + timedelta(minutes=4)),
        ],
        total_questions=5,
        starttime=T0,
        endtime=None,
        duration_seconds=600,
        now_utc=T0 + timedelta(minutes=7),
    )

    assert [(row.rank, row.username) for row in rows] == [(1, "alice"), (2, "bob")]
    alice, bob = rows
    assert alice.total_time_seconds == 240
    assert alice.time_per_question == 48
    # bob has not finished, so the clock runs until now
    assert bob.total_time_seconds == 420
    assert bob.time_per_question == 140
    assert alice.endtime is None


def test_equal_scores_are_ranked_by_time_per_question() -> None:
    rows = rank_members(
        [
            _member(1, "slow", answered=2, correct=2, last_answer_at=T0 + timedelta(minutes=8)),
            _member(2, "fast", answered=2, correct=2, last_answer_at=T0 + timedelta(minutes=2)),
        ],
        total_questions=2,
        starttime=T0,
        endtime=T0 + timedelta(minutes=9),
        duration_seconds=600,
        now_utc=T0 + timedelta(hours=1),
    )

    assert [row.username for row in rows] == ["fast", "slow"]
    assert [row.rank for row in rows] == [1, 2]


def test_member_without_answers_has_null_aggregates_and_sorts_last() -> None:
    rows = rank_members(
        [
            _member(1, "idle"),
            _member(2, "wrong", answered=1, correct=0, last_answer_at=T0 + timedelta(minutes=1)),
        ],
        total_questions=3,
        starttime=T0,
        endtime=T0 + timedelta(minutes=5),
        duration_seconds=600,
        now_utc=T0 + timedelta(minutes=6),
    )

    assert [row.username for row in rows] == ["wrong", "idle"]
    idle = rows[1]
    assert idle.rank == 2
    assert idle.questions_answered is None
    assert idle.questions_answered_correct is None
    assert idle.time_per_question is None
    assert idle.questions_answered_count == 0
    assert idle.total_time_seconds == 300


def test_full_ties_fall_back_to_user_id() -> None:
    rows = rank_members(
        [_member(9, "zed"), _member(3, "amy"), _member(5, "kim")],
        total_questions=4,
        starttime=None,
        endtime=None,
        duration_seconds=600,
        now_utc=T0,
    )

    assert [row.user_id for row in rows] == [3, 5, 9]
    assert [row.rank for row in rows] == [1, 2, 3]
    assert all(row.total_time_seconds is None for row in rows)


def test_weights_drive_the_score() -> None:
    rows = rank_members(
        [
            _member(1, "light", answered=2, correct=2, answered_weight=2, last_answer_at=T0 + timedelta(minutes=1)),
            _member(2, "heavy", answered=1, correct=3, answered_weight=3, last_answer_at=T0 + timedelta(minutes=3)),
        ],
        total_questions=5,
        starttime=T0,
        endtime=T0 + timedelta(minutes=4),
        duration_seconds=600,
        now_utc=T0 + timedelta(minutes=5),
    )

    assert [row.username for row in rows] == ["heavy", "light"]
    assert rows[0].questions_answered == 3
    assert rows[0].total_questions == 5


def test_ranks_are_monotonic_in_score_then_speed() -> None:
    members = [
        _member(user_id, f"user{user_id}", answered=3, correct=correct, last_answer_at=T0 + timedelta(seconds=seconds))
        for user_id, correct, seconds in [(1, 1, 50), (2, 3, 90), (3, 3, 30), (4, 2, 10), (5, 0, 5)]
    ]
    rows = rank_members(
        members,
        total_questions=3,
        starttime=T0,
        endtime=None,
        duration_seconds=600,
        now_utc=T0 + timedelta(minutes=2),
    )

    keys = [(-(row.questions_answered_correct or 0), row.time_per_question) for row in rows]
    assert keys == sorted(keys)
    assert [row.user_id for row in rows] == [3, 2, 4, 1, 5]


def test_resolve_effective_endtime() -> None:
    kwargs = {"starttime": T0, "duration_seconds": 600}
    assert resolve_effective_endtime(starttime=None, endtime=None, duration_seconds=600, now_utc=T0) is None
    assert resolve_effective_endtime(endtime=None, now_utc=T0 + timedelta(minutes=5), **kwargs) is None
    assert resolve_effective_endtime(endtime=None, now_utc=T0 + timedelta(minutes=15), **kwargs) == T0 + timedelta(
        minutes=10
    )
    assert resolve_effective_endtime(
        endtime=T0 + timedelta(minutes=3),
        now_utc=T0 + timedelta(minutes=15),
        **kwargs,
    ) == T0 + timedelta(minutes=3)
    assert resolve_effective_endtime(
        endtime=T0 + timedelta(minutes=30),
        now_utc=T0 + timedelta(minutes=31),
        **kwargs,
    ) == T0 + timedelta(minutes=10)
