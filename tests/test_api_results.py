import asyncio
import json

import httpx

from quizzy.main import app
from tests.helpers import make_result, run, seed


def test_submit_result(client, store):
    response = client.post("/api/results", json=make_result())

    assert response.status_code == 201
    body = response.json()
    assert body["studentName"] == "Ann"
    assert body["percentage"] == 75
    assert body["completed"] is True
    assert body["answers"] == [{"questionId": "q1", "selectedAnswer": "4", "correct": True, "timeSpent": 12}]
    assert body["achievements"] == []

    stored = run(store.load())["results"]
    assert stored == [body]


def test_submit_result_reports_every_violation(client, store):
    response = client.post("/api/results", json={"score": -1})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    fields = " ".join(body["details"])
    for field in ("studentName", "score", "totalQuestions", "answers", "timestamp"):
        assert field in fields
    assert run(store.load())["results"] == []


def test_score_cannot_exceed_total(client):
    response = client.post("/api/results", json=make_result(score=5, total=4))
    assert response.status_code == 400
    assert "score cannot exceed totalQuestions" in response.json()["details"][0]


def test_unknown_quiz_is_rejected(client, store):
    response = client.post("/api/results", json=make_result(quizId="nope"))
    assert response.status_code == 404
    assert response.json() == {"error": "Quiz not found"}
    assert run(store.load())["results"] == []


def test_result_stats_reflect_new_submission(client):
    before = client.get("/api/results/stats").json()
    assert before["totalAttempts"] == 0
    assert before["averageScore"] == 0

    client.post("/api/results", json=make_result(name="Bob", score=1, total=4))
    client.post("/api/results", json=make_result(name="Ann", score=3, total=4))

    after = client.get("/api/results/stats").json()
    assert after["totalAttempts"] == 2
    assert after["averageScore"] == 2
    assert after["highestScore"] == 3
    assert after["lowestScore"] == 1
    assert [r["studentName"] for r in after["recentAttempts"]] == ["Bob", "Ann"]
    assert after["completionRate"] == 100


def test_filter_results_by_student(client):
    client.post("/api/results", json=make_result(name="Ann"))
    client.post("/api/results", json=make_result(name="Bob"))

    by_query = client.get("/api/results", params={"studentName": "Bob"}).json()
    by_path = client.get("/api/results/user/Bob").json()

    assert [r["studentName"] for r in by_query] == ["Bob"]
    assert by_query == by_path
    assert len(client.get("/api/results").json()) == 2


def test_submission_awards_achievements_once(client, store):
    created = client.post(
        "/api/achievements",
        json={"name": "First Step", "description": "Completed the first quiz.", "conditions": {"quizzes_completed": 1}},
    ).json()

    first = client.post("/api/results", json=make_result()).json()
    second = client.post("/api/results", json=make_result()).json()

    assert first["achievements"] == ["First Step"]
    assert second["achievements"] == []

    document = run(store.load())
    assert document["achievements"][0]["earnedCount"] == 1
    assert document["userAchievements"] == {"Ann": [created["id"]]}


def test_submission_refreshes_user_counters(client):
    user = client.post("/api/users", json={"name": "Ann", "email": "ann@quizzy.com"}).json()

    client.post("/api/results", json=make_result(score=3, total=4))
    client.post("/api/results", json=make_result(score=4, total=4))

    refreshed = client.get(f"/api/users/{user['id']}").json()
    assert refreshed["quizzesCompleted"] == 2
    assert refreshed["averageScore"] == 87.5


def test_concurrent_submissions_are_all_persisted(client, store):
    seed(store, results=[{"id": "existing", "studentName": "Old", "score": 1, "totalQuestions": 1}])

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            return await asyncio.gather(*(
                ac.post("/api/results", json=make_result(name=f"student-{i}", timestamp=1700000000000 + i))
                for i in range(20)
            ))

    responses = run(scenario())

    assert all(r.status_code == 201 for r in responses)
    results = json.loads(store.path.read_text(encoding="utf-8"))["results"]
    assert len(results) == 21
    assert len({r["id"] for r in results}) == 21
