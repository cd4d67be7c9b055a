from igi_backend.config import settings


def _seed_rounds(fake_db, active=None):
    rows = fake_db.seed(
        "rounds",
        {"name": "Round 1", "status": "pending", "Flag": 0, "timer": 600},
        {"name": "Round 2", "status": "pending", "Flag": 0, "timer": 900},
        {"name": "Round 3", "status": "pending", "Flag": 0, "timer": None},
    )
    if active is not None:
        fake_db.rows("rounds")[active]["status"] = "active"
    return rows


# Rounds

def test_contest_state_pending_without_active_round(client, fake_db):
    _seed_rounds(fake_db)

    assert client.get("/api/contest/state").json() == {"currentRound": None, "roundId": None, "status": "pending"}


def test_contest_state_reports_active_round(client, fake_db):
    rows = _seed_rounds(fake_db, active=1)

    state = client.get("/api/contest/state").json()

    assert state == {"currentRound": "Round 2", "roundId": rows[1]["id"], "status": "active"}


def test_rounds_state_lists_in_creation_order_with_flag(client, fake_db):
    _seed_rounds(fake_db)

    rounds = client.get("/api/contest/rounds/state").json()

    assert [r["name"] for r in rounds] == ["Round 1", "Round 2", "Round 3"]
    assert rounds[0]["Flag"] == 0 and rounds[0]["timer"] == 600


def test_commander_unlocks_round(client, admin_headers, fake_db):
    rows = _seed_rounds(fake_db)

    response = client.patch(
        f"/api/contest/rounds/{rows[0]['id']}", json={"Flag": 1, "status": "active"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["Flag"] == 1
    stored = fake_db.rows("rounds")[0]
    assert stored["Flag"] == 1 and stored["status"] == "active"
    assert client.get("/api/contest/state").json()["currentRound"] == "Round 1"


def test_update_round_rejects_empty_and_unknown(client, admin_headers, fake_db):
    rows = _seed_rounds(fake_db)

    assert client.patch(f"/api/contest/rounds/{rows[0]['id']}", json={}, headers=admin_headers).status_code == 400
    assert client.patch("/api/contest/rounds/missing", json={"timer": 5}, headers=admin_headers).status_code == 404


def test_update_round_rejects_unknown_status(client, admin_headers, fake_db):
    rows = _seed_rounds(fake_db)

    response = client.patch(f"/api/contest/rounds/{rows[0]['id']}", json={"status": "paused"}, headers=admin_headers)

    assert response.status_code == 400


def test_teams_cannot_update_rounds(client, team_headers, fake_db):
    rows = _seed_rounds(fake_db)

    response = client.patch(f"/api/contest/rounds/{rows[0]['id']}", json={"Flag": 1}, headers=team_headers("TEAM-A"))

    assert response.status_code == 403
    assert fake_db.rows("rounds")[0]["Flag"] == 0


# Telecast

def test_telecast_status_defaults_when_nothing_triggered(client):
    status = client.get("/api/contest/telecast/status").json()

    assert status["active"] is False
    assert status["videoPath"] == settings.telecast_default_video


def test_telecast_status_degrades_on_database_error(client, fake_db):
    fake_db.fail("telecast", "select", Exception("relation telecast does not exist"))

    response = client.get("/api/contest/telecast/status")

    assert response.status_code == 200
    assert response.json()["active"] is False


def test_trigger_replaces_active_telecast(client, admin_headers, fake_db):
    client.post("/api/contest/telecast/trigger", headers=admin_headers)
    response = client.post("/api/contest/telecast/trigger", json={"videoPath": "/briefing2.mp4"}, headers=admin_headers)

    assert response.json() == {"success": True, "videoPath": "/briefing2.mp4"}
    assert [row["active"] for row in fake_db.rows("telecast")] == [False, True]

    status = client.get("/api/contest/telecast/status").json()
    assert status["active"] is True
    assert status["videoPath"] == "/briefing2.mp4"
    assert isinstance(status["timestamp"], int)


def test_clear_telecast(client, admin_headers, fake_db):
    client.post("/api/contest/telecast/trigger", headers=admin_headers)

    assert client.post("/api/contest/telecast/clear", headers=admin_headers).json() == {"success": True}
    assert client.get("/api/contest/telecast/status").json()["active"] is False


def test_trigger_requires_commander(client, team_headers):
    assert client.post("/api/contest/telecast/trigger").status_code == 401
    assert client.post("/api/contest/telecast/trigger", headers=team_headers("TEAM-A")).status_code == 403


def test_mark_viewed_and_list_viewers(client, admin_headers, fake_db):
    assert client.post("/api/contest/telecast/mark-viewed", json={"teamId": "TEAM-A"}).json() == {"success": True}
    client.post("/api/contest/telecast/mark-viewed", json={"teamId": "TEAM-B"})

    viewers = client.get("/api/contest/telecast/viewers", headers=admin_headers).json()

    assert {v["team_id"] for v in viewers} == {"TEAM-A", "TEAM-B"}


def test_mark_viewed_requires_team(client):
    response = client.post("/api/contest/telecast/mark-viewed", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "Team ID is required"
