from fastapi import APIRouter, Depends
from igi_backend.database.supabase_client import get_supabase_admin
from igi_backend.modules.auth.schemas import LoginRequest, LoginResponse, SessionResponse
from igi_backend.modules.auth.service import AuthService
from igi_backend.core.dependencies import get_session_id, get_optional_session
from igi_backend.core.sessions import SessionUser
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(supabase: Client = Depends(get_supabase_admin)) -> AuthService:
    return AuthService(supabase)


@router.post("/commander-login", response_model=LoginResponse)
async def commander_login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Start a commander (admin) session"""
    user, session_id = service.commander_login(login_data.email, login_data.password)
    return LoginResponse(user=user, sessionId=session_id)


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Start a team session"""
    user, session_id = service.login(login_data.email, login_data.password)
    return LoginResponse(user=user, sessionId=session_id)


@router.get("/session", response_model=SessionResponse)
async def get_session(session: Optional[SessionUser] = Depends(get_optional_session)):
    return SessionResponse(user=session)


@router.post("/logout")
async def logout(
    session_id: Optional[str] = Depends(get_session_id),
    service: AuthService = Depends(get_auth_service)
):
    service.logout(session_id)
    return {"success": True}
