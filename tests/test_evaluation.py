import pytest

from igi_backend.data import question_bank
from igi_backend.grading.errors import GeminiRequestError
from igi_backend.modules.evaluation import worker
from igi_backend.modules.evaluation.schemas import normalize_round
from igi_backend.modules.evaluation.service import EvaluationService, resolve_question


def queued(team_id, round_id="round1", question_id="r1-q1", answer="loop over it", **fields):
    entry = {
        "team_id": team_id,
        "round": round_id,
        "question_id": question_id,
        "raw_answer": answer,
        "status": "pending",
        "retry_count": 0,
        "max_retries": 3,
        "submission_time": "2026-01-01T10:00:00+00:00",
    }
    entry.update(fields)
    return entry


@pytest.fixture
def scorer(monkeypatch):
    """Replace Gemini scoring: answers containing 'bad' fail, everything else scores 7"""
    calls = []

    async def request_score(question, expected_answer, answer, client=None):
        calls.append((question, expected_answer, answer))
        if "bad" in answer:
            raise GeminiRequestError(500, "upstream error")
        return 7

    monkeypatch.setattr(worker, "request_score", request_score)
    return calls


def test_normalize_round():
    assert normalize_round("1") == "round1"
    assert normalize_round(" Round2 ") == "round2"
    with pytest.raises(ValueError):
        normalize_round("round9")


def test_resolve_question_uses_question_bank():
    first = question_bank.get_round1_question(1)

    assert resolve_question("round1", "r1-q1") == (first.question_text, first.expected_answer)
    assert resolve_question("round3", "r3-q2")[0] == question_bank.get_question_details("round3", "r3-q2").prompt
    assert resolve_question("round2", "r2-q3")[0].startswith(question_bank.get_round2_question(3).title)
    assert resolve_question("round1", "mystery") == ("mystery", "")


def test_team_enqueues_answer(client, team_headers, fake_db):
    response = client.post(
        "/api/contest/evaluation",
        json={"team_id": "TEAM-A", "round": "1", "question_id": "r1-q4", "raw_answer": "sort then scan"},
        headers=team_headers("TEAM-A"),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["round"] == "round1"
    assert body["status"] == "pending"
    assert body["retry_count"] == 0 and body["max_retries"] == 3
    assert fake_db.rows("evaluation")[0]["queue_id"] == body["queue_id"]


def test_queue_accepts_trailing_slash(client, team_headers, admin_headers):
    payload = {"team_id": "TEAM-A", "round": "round2", "question_id": "r2-q1", "raw_answer": "swap the bounds"}

    response = client.post("/api/contest/evaluation/", json=payload, headers=team_headers("TEAM-A"))

    assert response.status_code == 201
    rows = client.get("/api/contest/evaluation/", headers=admin_headers).json()
    assert [row["queue_id"] for row in rows] == [response.json()["queue_id"]]


def test_enqueue_rejects_other_team_and_bad_round(client, team_headers):
    headers = team_headers("TEAM-A")
    payload = {"team_id": "TEAM-B", "round": "round1", "question_id": "r1-q1", "raw_answer": "x"}

    assert client.post("/api/contest/evaluation", json=payload, headers=headers).status_code == 403
    assert client.post(
        "/api/contest/evaluation", json={**payload, "team_id": "TEAM-A", "round": "round7"}, headers=headers
    ).status_code == 400


def test_list_evaluations_filters(client, admin_headers, fake_db):
    fake_db.seed("evaluation", queued("TEAM-A"), queued("TEAM-B", round_id="round2", question_id="r2-q1"))

    rows = client.get("/api/contest/evaluation", params={"round": "2"}, headers=admin_headers).json()

    assert [row["team_id"] for row in rows] == ["TEAM-B"]
    assert client.get("/api/contest/evaluation", params={"round": "x"}, headers=admin_headers).status_code == 400
    assert client.get("/api/contest/evaluation", params={"status": "completed"}, headers=admin_headers).json() == []


def test_process_scores_pending_answers(client, admin_headers, fake_db, scorer):
    fake_db.seed(
        "evaluation",
        queued("TEAM-A"),
        queued("TEAM-B", answer="bad answer"),
        queued("TEAM-C", round_id="round2", question_id="r2-q1"),
    )

    response = client.post("/api/contest/evaluation/process", json={"round": "1"}, headers=admin_headers)

    assert response.status_code == 202
    job_id = response.json()["id"]
    job = client.get(f"/api/contest/evaluation/jobs/{job_id}", headers=admin_headers).json()
    assert job["status"] == "completed" and job["progress"] == 100
    assert job["round"] == "round1"

    entries = {row["team_id"]: row for row in fake_db.rows("evaluation")}
    assert entries["TEAM-A"]["status"] == "completed" and entries["TEAM-A"]["score"] == 7
    assert entries["TEAM-B"]["status"] == "pending"
    assert entries["TEAM-B"]["retry_count"] == 1
    assert "HTTP 500" in entries["TEAM-B"]["last_error"]
    assert entries["TEAM-C"]["status"] == "pending"
    assert entries["TEAM-C"].get("score") is None
    assert scorer[0][1] == question_bank.get_round1_question(1).expected_answer


def test_process_takes_oldest_first_up_to_limit(client, admin_headers, fake_db, scorer):
    fake_db.seed(
        "evaluation",
        queued("TEAM-NEW", submission_time="2026-01-01T12:00:00+00:00"),
        queued("TEAM-OLD", submission_time="2026-01-01T09:00:00+00:00"),
        queued("TEAM-MID", submission_time="2026-01-01T10:30:00+00:00"),
    )

    client.post("/api/contest/evaluation/process", json={"limit": 2}, headers=admin_headers)

    statuses = {row["team_id"]: row["status"] for row in fake_db.rows("evaluation")}
    assert statuses == {"TEAM-OLD": "completed", "TEAM-MID": "completed", "TEAM-NEW": "pending"}


def test_failed_answer_stops_after_max_retries(client, admin_headers, fake_db, scorer):
    fake_db.seed("evaluation", queued("TEAM-A", answer="bad again", retry_count=2))

    client.post("/api/contest/evaluation/process", json={}, headers=admin_headers)

    entry = fake_db.rows("evaluation")[0]
    assert entry["status"] == "failed"
    assert entry["retry_count"] == 3
    assert entry["next_retry_at"] is None


def test_job_fails_when_queue_is_unreadable(client, admin_headers, fake_db, scorer):
    fake_db.fail("evaluation", "select", Exception("connection refused"))

    job_id = client.post("/api/contest/evaluation/process", json={}, headers=admin_headers).json()["id"]

    job = client.get(f"/api/contest/evaluation/jobs/{job_id}", headers=admin_headers).json()
    assert job["status"] == "failed"
    assert "connection refused" in job["error"]


def test_failed_completion_write_returns_answer_to_pending(client, admin_headers, fake_db, scorer, monkeypatch):
    flaky, steady = fake_db.seed("evaluation", queued("TEAM-A"), queued("TEAM-B"))
    mark_completed = EvaluationService.mark_completed

    def failing_mark_completed(self, queue_id, score, feedback=None):
        if queue_id == flaky["queue_id"]:
            raise Exception("connection reset")
        return mark_completed(self, queue_id, score, feedback)

    monkeypatch.setattr(EvaluationService, "mark_completed", failing_mark_completed)

    job_id = client.post("/api/contest/evaluation/process", json={}, headers=admin_headers).json()["id"]

    job = client.get(f"/api/contest/evaluation/jobs/{job_id}", headers=admin_headers).json()
    assert job["status"] == "completed"
    entries = {row["team_id"]: row for row in fake_db.rows("evaluation")}
    assert entries["TEAM-A"]["status"] == "pending"
    assert entries["TEAM-A"]["retry_count"] == 1
    assert entries["TEAM-A"]["last_error"] == "connection reset"
    assert entries["TEAM-B"]["status"] == "completed"
    assert steady["queue_id"] == entries["TEAM-B"]["queue_id"]


def test_deleted_entry_does_not_stop_the_job(client, admin_headers, fake_db, scorer, monkeypatch):
    fake_db.seed("evaluation", queued("TEAM-A"))
    list_pending = EvaluationService.list_pending

    def with_deleted_entry(self, round_id=None, limit=10):
        return [queued("TEAM-GONE", queue_id="deleted-row")] + list_pending(self, round_id, limit)

    monkeypatch.setattr(EvaluationService, "list_pending", with_deleted_entry)

    job_id = client.post("/api/contest/evaluation/process", json={}, headers=admin_headers).json()["id"]

    job = client.get(f"/api/contest/evaluation/jobs/{job_id}", headers=admin_headers).json()
    assert job["status"] == "completed"
    assert fake_db.rows("evaluation")[0]["status"] == "completed"
    assert [row["team_id"] for row in fake_db.rows("evaluation")] == ["TEAM-A"]


def test_process_validates_limit(client, admin_headers):
    assert client.post("/api/contest/evaluation/process", json={"limit": 0}, headers=admin_headers).status_code == 400


def test_list_jobs_newest_first(client, admin_headers, scorer):
    first = client.post("/api/contest/evaluation/process", json={}, headers=admin_headers).json()["id"]
    second = client.post("/api/contest/evaluation/process", json={}, headers=admin_headers).json()["id"]

    jobs = client.get("/api/contest/evaluation/jobs", headers=admin_headers).json()

    assert [job["id"] for job in jobs] == [second, first]


def test_unknown_job(client, admin_headers):
    assert client.get("/api/contest/evaluation/jobs/missing", headers=admin_headers).status_code == 404


def test_override_score(client, admin_headers, fake_db):
    entry = fake_db.seed("evaluation", queued("TEAM-A", status="failed", last_error="timeout"))[0]

    response = client.patch(
        f"/api/contest/evaluation/{entry['queue_id']}",
        json={"score": 9.5, "feedback": "Clear reasoning"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["score"] == 9.5
    assert body["last_error"] is None


def test_override_validation(client, admin_headers, fake_db):
    entry = fake_db.seed("evaluation", queued("TEAM-A"))[0]

    assert client.patch(
        f"/api/contest/evaluation/{entry['queue_id']}", json={"score": 11}, headers=admin_headers
    ).status_code == 400
    assert client.patch(
        "/api/contest/evaluation/missing", json={"score": 5}, headers=admin_headers
    ).status_code == 404


def test_evaluation_admin_routes_require_commander(client, team_headers):
    headers = team_headers("TEAM-A")

    assert client.get("/api/contest/evaluation", headers=headers).status_code == 403
    assert client.post("/api/contest/evaluation/process", json={}, headers=headers).status_code == 403
