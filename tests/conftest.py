import pytest
from fastapi.testclient import TestClient

from fakes import FakeSupabase
from igi_backend.config import settings
from igi_backend.core.leaderboard_cache import leaderboard_cache
from igi_backend.core.sessions import SessionUser, create_session, clear_sessions, ROLE_TEAM
from igi_backend.database.supabase_client import get_supabase, get_supabase_admin
from igi_backend.modules.contest.service import clear_story_acks

COMMANDER_PASSWORD = "test-commander-pass"
GEMINI_KEY_FIELDS = ("gemini_api_key", "gemini_api_key_2", "gemini_api_key_3", "google_api_key")


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """No real keys, buckets or stale in-process state leak into a test."""
    monkeypatch.setattr(settings, "commander_password", COMMANDER_PASSWORD)
    for field in GEMINI_KEY_FIELDS:
        monkeypatch.setattr(settings, field, None)
    monkeypatch.setattr(settings, "aws_access_key_id", None)
    monkeypatch.setattr(settings, "aws_secret_access_key", None)
    monkeypatch.setattr(settings, "s3_bucket_name", None)
    clear_sessions()
    clear_story_acks()
    leaderboard_cache.invalidate_all()
    yield
    clear_sessions()
    clear_story_acks()
    leaderboard_cache.invalidate_all()


@pytest.fixture
def client(fake_db):
    from igi_backend.main import app

    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_supabase_admin] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/auth/commander-login",
        json={"email": settings.commander_email, "password": COMMANDER_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {"X-Session-Id": response.json()["sessionId"]}


@pytest.fixture
def team_headers():
    """Build session headers for a team without going through login"""
    def _headers(team_id: str, team_name: str = "alpha@igifosscit"):
        session_id = create_session(SessionUser(
            email=team_name, role=ROLE_TEAM, team_id=team_id, display_name=team_name,
        ))
        return {"X-Session-Id": session_id}
    return _headers
