import hmac
import logging
from typing import Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from igi_backend.config import settings
from igi_backend.core.sessions import SessionUser, create_session, delete_session, ROLE_ADMIN, ROLE_TEAM
from igi_backend.modules.teams.service import TeamService

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    @staticmethod
    def _require_credentials(email: Optional[str], password: Optional[str]) -> None:
        if not email or not password:
            raise HTTPException(status_code=400, detail="Missing credentials")

    def commander_login(self, email: Optional[str], password: Optional[str]) -> Tuple[SessionUser, str]:
        """Log in the contest commander configured through COMMANDER_EMAIL / COMMANDER_PASSWORD"""
        self._require_credentials(email, password)
        if not settings.commander_password:
            logger.error("Commander login attempted but COMMANDER_PASSWORD is not set")
            raise HTTPException(status_code=503, detail="Commander login is not configured")

        email_ok = hmac.compare_digest(normalize_email(email), normalize_email(settings.commander_email))
        password_ok = hmac.compare_digest(password, settings.commander_password)
        if not (email_ok and password_ok):
            logger.warning("Rejected commander login")
            raise HTTPException(status_code=401, detail="Invalid commander credentials")

        user = SessionUser(
            email=settings.commander_email,
            role=ROLE_ADMIN,
            display_name=settings.commander_display_name,
        )
        return user, create_session(user)

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[SessionUser, str]:
        """Team login; identifiers must carry the team login suffix"""
        self._require_credentials(email, password)
        if not email.strip().lower().endswith(settings.team_login_suffix.lower()):
            raise HTTPException(status_code=401, detail="Invalid email or password")

        try:
            team = TeamService(self.supabase).login_team(email.strip(), password)
        except HTTPException as e:
            if e.status_code == 401:
                raise
            logger.error(f"Team login error: {e.detail}")
            raise HTTPException(status_code=401, detail="Invalid team credentials")

        user = SessionUser(
            email=team.team_name,
            role=ROLE_TEAM,
            team_id=team.team_id,
            display_name=team.team_name,
        )
        return user, create_session(user)

    def logout(self, session_id: Optional[str]) -> bool:
        return delete_session(session_id)
