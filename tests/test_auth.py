import pytest

from conftest import COMMANDER_PASSWORD
from fakes import make_team
from igi_backend.config import settings
from igi_backend.core import sessions
from igi_backend.core.sessions import ROLE_ADMIN, SessionUser


def test_commander_login_and_session(client):
    response = client.post(
        "/api/auth/commander-login",
        json={"email": "AgentAlpha@foss.ops ", "password": COMMANDER_PASSWORD},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["user"]["role"] == "admin"

    session = client.get("/api/auth/session", headers={"X-Session-Id": body["sessionId"]})
    assert session.json()["user"]["display_name"] == settings.commander_display_name


@pytest.mark.parametrize("payload, status", [
    ({"email": "agentalpha@foss.ops"}, 400),
    ({"password": COMMANDER_PASSWORD}, 400),
    ({"email": "agentalpha@foss.ops", "password": "wrong"}, 401),
    ({"email": "someone@foss.ops", "password": COMMANDER_PASSWORD}, 401),
])
def test_commander_login_rejections(client, payload, status):
    assert client.post("/api/auth/commander-login", json=payload).status_code == status


def test_commander_login_unconfigured(client, monkeypatch):
    monkeypatch.setattr(settings, "commander_password", None)

    response = client.post(
        "/api/auth/commander-login", json={"email": "agentalpha@foss.ops", "password": "anything"}
    )

    assert response.status_code == 503


def test_team_login_creates_team_session(client, fake_db):
    fake_db.seed("teams", make_team("TEAM-A", "alpha@igifosscit", password="IGI-029"))

    response = client.post("/api/auth/login", json={"email": "alpha@igifosscit", "password": "IGI-029"})

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["role"] == "team"
    assert user["team_id"] == "TEAM-A"


def test_team_login_requires_suffix(client, fake_db):
    fake_db.seed("teams", make_team("TEAM-A", "alpha", password="IGI-029"))

    response = client.post("/api/auth/login", json={"email": "alpha", "password": "IGI-029"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_team_login_wrong_password(client, fake_db):
    fake_db.seed("teams", make_team("TEAM-A", "alpha@igifosscit", password="IGI-029"))

    response = client.post("/api/auth/login", json={"email": "alpha@igifosscit", "password": "IGI-025"})

    assert response.status_code == 401


def test_team_login_database_error_is_unauthorized(client, fake_db):
    fake_db.fail("teams", "select", Exception("boom"))

    response = client.post("/api/auth/login", json={"email": "alpha@igifosscit", "password": "IGI-029"})

    assert response.status_code == 401


def test_session_without_header_is_empty(client):
    assert client.get("/api/auth/session").json() == {"user": None}


def test_logout_ends_session(client, admin_headers):
    assert client.post("/api/auth/logout", headers=admin_headers).json() == {"success": True}

    assert client.get("/api/auth/session", headers=admin_headers).json() == {"user": None}
    assert client.get("/api/teams/admin/teams", headers=admin_headers).status_code == 401


def test_team_session_cannot_use_admin_routes(client, team_headers):
    response = client.get("/api/teams/admin/teams", headers=team_headers("TEAM-A"))

    assert response.status_code == 403
    assert response.json()["detail"] == "Commander access required"


# Session lifetime

def make_user(name="Commander Alpha"):
    return SessionUser(email="agentalpha@foss.ops", role=ROLE_ADMIN, display_name=name)


def test_session_expires_after_ttl(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(sessions.time, "monotonic", lambda: now[0])
    monkeypatch.setattr(settings, "session_ttl_seconds", 60)
    session_id = sessions.create_session(make_user())

    now[0] += 59
    assert sessions.get_session(session_id).display_name == "Commander Alpha"
    now[0] += 1
    assert sessions.get_session(session_id) is None


def test_new_login_drops_expired_sessions(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(sessions.time, "monotonic", lambda: now[0])
    monkeypatch.setattr(settings, "session_ttl_seconds", 60)
    stale = sessions.create_session(make_user("Stale"))

    now[0] += 120
    fresh = sessions.create_session(make_user("Fresh"))

    assert stale not in sessions._sessions
    assert sessions.get_session(fresh).display_name == "Fresh"


def test_expired_session_is_unauthorized(client, monkeypatch):
    monkeypatch.setattr(settings, "session_ttl_seconds", 0)
    response = client.post(
        "/api/auth/commander-login",
        json={"email": settings.commander_email, "password": COMMANDER_PASSWORD},
    )
    headers = {"X-Session-Id": response.json()["sessionId"]}

    assert client.get("/api/auth/session", headers=headers).json() == {"user": None}
    assert client.get("/api/teams/admin/teams", headers=headers).status_code == 401
