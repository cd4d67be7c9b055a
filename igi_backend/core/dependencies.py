"""
Core dependencies for route protection
"""

from fastapi import Depends, Header, HTTPException, status
from igi_backend.core.sessions import SessionUser, get_session, ROLE_ADMIN, ROLE_TEAM
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def get_session_id(x_session_id: Optional[str] = Header(default=None)) -> Optional[str]:
    return x_session_id


def get_optional_session(session_id: Optional[str] = Depends(get_session_id)) -> Optional[SessionUser]:
    return get_session(session_id)


def get_current_session(session: Optional[SessionUser] = Depends(get_optional_session)) -> SessionUser:
    """Resolve the logged-in user or reject the request"""
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return session


def require_admin(session: SessionUser = Depends(get_current_session)) -> SessionUser:
    if session.role != ROLE_ADMIN:
        logger.warning(f"Admin route refused for {session.display_name} ({session.role})")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Commander access required"
        )
    return session


def require_team_or_admin(session: SessionUser = Depends(get_current_session)) -> SessionUser:
    if session.role not in (ROLE_ADMIN, ROLE_TEAM):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Team or commander access required"
        )
    return session


def check_team_access(team_id: str, session: SessionUser) -> SessionUser:
    """Teams may only act for themselves; the commander may act for anyone"""
    if session.role == ROLE_ADMIN:
        return session
    if session.team_id != team_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only submit for your own team"
        )
    return session
