from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.routes import internal_categories, internal_content, internal_games
from app.core.config import get_settings
from app.main import app


@pytest.fixture
def api_sessions(monkeypatch, session_factory):
    for module in (internal_games, internal_categories, internal_content):
        monkeypatch.setattr(module, "SessionLocal", session_factory)
    return session_factory


def _client() -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app, client=("127.0.0.1", 8080)),
        base_url="http://testserver",
        headers={"X-Internal-Token": get_settings().internal_api_token},
    )


def _as_user(user_id: int) -> dict[str, str]:
    return {"X-Acting-User-Id": str(user_id)}


async def _create_user(client: AsyncClient, username: str, *, is_superuser: bool = False) -> int:
    response = await client.post(
        "/internal/users",
        json={"username": username, "is_superuser": is_superuser},
    )
    assert response.status_code == 201
    return response.json()["user_id"]


async def _create_quiz_with_questions(client: AsyncClient, owner_id: int, *, questions: int = 2) -> tuple[int, list[int]]:
    category = await client.post("/internal/categories", json={"name": "Geography"})
    assert category.status_code == 201
    quiz = await client.post("/internal/quizzes", json={"name": "Capitals"}, headers=_as_user(owner_id))
    assert quiz.status_code == 201
    quiz_id = quiz.json()["quiz_id"]

    question_ids: list[int] = []
    for idx in range(questions):
        question = await client.post(
            "/internal/questions",
            json={"category_id": category.json()["category_id"], "questiontext": f"Capital {idx}?"},
            headers=_as_user(owner_id),
        )
        assert question.status_code == 201
        question_id = question.json()["question_id"]
        linked = await client.post(
            f"/internal/quizzes/{quiz_id}/questions",
            json={"question_id": question_id},
            headers=_as_user(owner_id),
        )
        assert linked.status_code == 200
        assert linked.json()["added_now"] is True
        question_ids.append(question_id)
    return quiz_id, question_ids


@pytest.mark.asyncio
async def test_internal_routes_require_token(api_sessions) -> None:
    async with AsyncClient(
        transport=ASGITransport(app=app, client=("127.0.0.1", 8080)),
        base_url="http://testserver",
    ) as client:
        response = await client.get("/internal/games/open")

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}


@pytest.mark.asyncio
async def test_internal_routes_reject_ip_outside_allowlist(api_sessions) -> None:
    async with AsyncClient(
        transport=ASGITransport(app=app, client=("198.51.100.7", 8080)),
        base_url="http://testserver",
        headers={"X-Internal-Token": get_settings().internal_api_token},
    ) as client:
        response = await client.get("/internal/games/open")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_mutating_routes_require_acting_user(api_sessions) -> None:
    async with _client() as client:
        response = await client.post("/internal/games/1/start")

    assert response.status_code == 401
    assert response.json() == {"detail": {"code": "E_ACTING_USER_REQUIRED"}}


@pytest.mark.asyncio
async def test_game_flow_over_http(api_sessions) -> None:
    async with _client() as client:
        host_id = await _create_user(client, "host")
        player_id = await _create_user(client, "player")
        quiz_id, question_ids = await _create_quiz_with_questions(client, host_id)

        created = await client.post(
            "/internal/games",
            json={"quiz_id": quiz_id, "name": "Lunch quiz", "duration": "00:10:00"},
            headers=_as_user(host_id),
        )
        assert created.status_code == 201
        game = created.json()
        assert game["duration_seconds"] == 600
        assert game["starttime"] is None
        game_id = game["game_id"]

        open_games = await client.get("/internal/games/open")
        assert [item["game_id"] for item in open_games.json()] == [game_id]

        joined = await client.post(f"/internal/games/{game_id}/members", headers=_as_user(player_id))
        joined_again = await client.post(f"/internal/games/{game_id}/members", headers=_as_user(player_id))
        assert joined.json()["joined_now"] is True
        assert joined_again.json() == {**joined.json(), "joined_now": False}

        forbidden_start = await client.post(f"/internal/games/{game_id}/start", headers=_as_user(player_id))
        assert forbidden_start.status_code == 403
        assert forbidden_start.json() == {"detail": {"code": "E_GAME_FORBIDDEN"}}

        early_stop = await client.post(f"/internal/games/{game_id}/stop", headers=_as_user(player_id))
        assert early_stop.status_code == 409
        assert early_stop.json() == {"detail": {"code": "E_GAME_NOT_STARTED"}}

        started = await client.post(f"/internal/games/{game_id}/start", headers=_as_user(host_id))
        restarted = await client.post(f"/internal/games/{game_id}/start", headers=_as_user(host_id))
        assert started.json()["started_now"] is True
        assert restarted.json()["started_now"] is False
        assert restarted.json()["previous_starttime"] == started.json()["game"]["starttime"]

        answered = await client.post(
            f"/internal/games/{game_id}/answers",
            json={"question_id": question_ids[0], "question_correct": 100},
            headers=_as_user(player_id),
        )
        assert answered.status_code == 200
        assert answered.json()["recorded_now"] is True

        invalid_answer = await client.post(
            f"/internal/games/{game_id}/answers",
            json={"question_id": question_ids[1], "question_correct": 50},
            headers=_as_user(player_id),
        )
        assert invalid_answer.status_code == 422
        assert invalid_answer.json() == {
            "detail": {"code": "E_GAME_INVALID_INPUT", "field": "question_correct"}
        }

        progress = await client.get(f"/internal/games/{game_id}/progress", headers=_as_user(player_id))
        assert progress.json()["answered_count"] == 1
        assert progress.json()["question_ids"] == question_ids

        report = await client.get(f"/internal/games/{game_id}/report")
        assert report.status_code == 200
        rows = report.json()["rows"]
        assert [(row["rank"], row["username"], row["questions_answered_correct"]) for row in rows] == [
            (1, "player", 1)
        ]

        permission = await client.get(f"/internal/games/{game_id}/permission", headers=_as_user(player_id))
        assert permission.json()["permission"] == "NOT_OWNER"

        stopped = await client.post(f"/internal/games/{game_id}/stop", headers=_as_user(player_id))
        assert stopped.status_code == 200
        assert stopped.json()["stopped_now"] is True
        assert stopped.json()["game"]["endtime"] is not None

        active = await client.get(f"/internal/users/{player_id}/games", params={"scope": "active"})
        participated = await client.get(f"/internal/users/{player_id}/games", params={"scope": "participated"})
        assert active.json() == []
        assert [item["game_id"] for item in participated.json()] == [game_id]

        granted = await client.post(
            "/internal/achievements/evaluate",
            json={
                "event_name": "game_finished",
                "user_id": player_id,
                "codes": ["question-answered-correct"],
                "payload": {"question-count": 1},
            },
        )
        assert granted.json() == {"user_id": player_id, "granted": ["question-answered-correct"]}

        fastest = await client.post(
            "/internal/achievements/evaluate",
            json={
                "event_name": "game_finished",
                "user_id": player_id,
                "codes": ["game-win-fastest"],
                "payload": {
                    "game-id": game_id,
                    "member-count": 1,
                    "now-utc": stopped.json()["game"]["endtime"],
                },
            },
        )
        assert fastest.status_code == 200
        assert fastest.json() == {"user_id": player_id, "granted": ["game-win-fastest"]}

        removed = await client.delete(f"/internal/games/{game_id}", headers=_as_user(host_id))
        assert removed.status_code == 204
        missing = await client.get(f"/internal/games/{game_id}")
        assert missing.status_code == 404
        assert missing.json() == {"detail": {"code": "E_GAME_NOT_FOUND"}}


@pytest.mark.asyncio
async def test_create_game_requires_quiz_owner(api_sessions) -> None:
    async with _client() as client:
        host_id = await _create_user(client, "host")
        other_id = await _create_user(client, "other")
        quiz_id, _ = await _create_quiz_with_questions(client, host_id, questions=1)

        response = await client.post(
            "/internal/games",
            json={"quiz_id": quiz_id, "name": "Not mine", "duration_seconds": 300},
            headers=_as_user(other_id),
        )
        bad_duration = await client.post(
            "/internal/games",
            json={"quiz_id": quiz_id, "name": "Typo", "duration": "10:99:00"},
            headers=_as_user(host_id),
        )

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_QUIZ_FORBIDDEN"}}
    assert bad_duration.status_code == 422
    assert bad_duration.json() == {"detail": {"code": "E_GAME_INVALID_INPUT", "field": "duration"}}


@pytest.mark.asyncio
async def test_unknown_achievement_code_is_rejected(api_sessions) -> None:
    async with _client() as client:
        response = await client.post(
            "/internal/achievements/evaluate",
            json={"event_name": "x", "user_id": 1, "codes": ["first-blood"]},
        )

    assert response.status_code == 422
    assert response.json() == {"detail": {"code": "E_ACHIEVEMENT_UNKNOWN"}}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("code", "payload", "field"),
    [
        ("game-win-fastest", {"game-id": 1, "member-count": "two"}, "member-count"),
        ("game-win-fastest", {"game-id": "abc"}, "game-id"),
        ("game-win-fastest", {"game-id": 1, "now-utc": "not-a-time"}, "now-utc"),
        ("question-answered-correct", {"question-count": "lots"}, "question-count"),
    ],
)
async def test_malformed_achievement_payload_is_rejected(api_sessions, code, payload, field) -> None:
    async with _client() as client:
        response = await client.post(
            "/internal/achievements/evaluate",
            json={"event_name": "game_finished", "user_id": 1, "codes": [code], "payload": payload},
        )

    assert response.status_code == 422
    assert response.json() == {"detail": {"code": "E_ACHIEVEMENT_PAYLOAD_INVALID", "field": field}}
