"""In-process session store keyed by the X-Session-Id header."""
import secrets
import threading
import time
import logging
from typing import Dict, Optional, Tuple

from pydantic import BaseModel

from igi_backend.config import settings

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_TEAM = "team"


class SessionUser(BaseModel):
    email: str
    role: str
    team_id: Optional[str] = None
    display_name: str


_lock = threading.Lock()
_sessions: Dict[str, Tuple[SessionUser, float]] = {}


def _purge_expired(now: float) -> None:
    expired = [session_id for session_id, (_, expires_at) in _sessions.items() if expires_at <= now]
    for session_id in expired:
        del _sessions[session_id]
    if expired:
        logger.debug(f"Dropped {len(expired)} expired sessions")


def create_session(user: SessionUser) -> str:
    """New session valid for SESSION_TTL_SECONDS; expired ones are dropped on the way"""
    session_id = secrets.token_urlsafe(24)
    now = time.monotonic()
    with _lock:
        _purge_expired(now)
        _sessions[session_id] = (user, now + settings.session_ttl_seconds)
    logger.info(f"Session created for {user.display_name} ({user.role})")
    return session_id


def get_session(session_id: Optional[str]) -> Optional[SessionUser]:
    if not session_id:
        return None
    with _lock:
        entry = _sessions.get(session_id)
        if entry is None:
            return None
        user, expires_at = entry
        if expires_at <= time.monotonic():
            del _sessions[session_id]
            return None
        return user


def delete_session(session_id: Optional[str]) -> bool:
    if not session_id:
        return False
    with _lock:
        return _sessions.pop(session_id, None) is not None


def clear_sessions() -> None:
    with _lock:
        _sessions.clear()
