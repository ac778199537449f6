"""Admin authentication endpoints and utilities."""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from teapos.core.config import settings

router = APIRouter()

SESSION_COOKIE = "admin_session"
SESSION_LIFETIME = timedelta(hours=12)

# In-memory admin sessions; a restart logs every admin out
_sessions: dict[str, dict] = {}


class LoginRequest(BaseModel):
    """Login request model."""
    password: str


class SessionInfo(BaseModel):
    """Session information response."""
    authenticated: bool
    expires_at: Optional[str] = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_session(response: Response) -> str:
    """Create a new admin session and set cookie."""
    session_token = secrets.token_urlsafe(32)
    _sessions[session_token] = {
        "authenticated": True,
        "expires_at": _now() + SESSION_LIFETIME,
        "created_at": _now(),
    }

    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_token,
        httponly=True,
        max_age=int(SESSION_LIFETIME.total_seconds()),
        samesite="lax",
    )
    return session_token


def verify_session(session_token: Optional[str]) -> bool:
    """Verify if session token is valid and not expired."""
    if not session_token:
        return False

    session = _sessions.get(session_token)
    if not session:
        return False

    if _now() > session["expires_at"]:
        del _sessions[session_token]
        return False

    return session.get("authenticated", False)


async def require_auth(request: Request) -> bool:
    """Dependency to require an admin session."""
    if not verify_session(request.cookies.get(SESSION_COOKIE)):
        raise HTTPException(status_code=401, detail="Authentication required")
    return True


@router.post("/api/auth/login")
async def login(login_req: LoginRequest, response: Response):
    """Login endpoint."""
    if not secrets.compare_digest(login_req.password.encode(), settings.admin_password.encode()):
        raise HTTPException(status_code=401, detail="Invalid password")

    session_token = create_session(response)
    return {
        "success": True,
        "message": "Login successful",
        "expires_at": _sessions[session_token]["expires_at"].isoformat(),
    }


@router.post("/api/auth/logout")
async def logout(request: Request, response: Response):
    """Logout endpoint."""
    session_token = request.cookies.get(SESSION_COOKIE)
    if session_token:
        _sessions.pop(session_token, None)

    response.delete_cookie(SESSION_COOKIE)
    return {"success": True, "message": "Logged out"}


@router.get("/api/auth/session")
async def get_session_info(request: Request) -> SessionInfo:
    """Get current session information."""
    session_token = request.cookies.get(SESSION_COOKIE)

    if verify_session(session_token):
        return SessionInfo(
            authenticated=True,
            expires_at=_sessions[session_token]["expires_at"].isoformat(),
        )

    return SessionInfo(authenticated=False)
