from pydantic import BaseModel
from typing import Optional

from igi_backend.core.sessions import SessionUser


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    user: SessionUser
    sessionId: str


class SessionResponse(BaseModel):
    user: Optional[SessionUser] = None
