"""Auth API — registration, login, logout, current user.

Learn: Routes for the session lifecycle:
- POST /auth/register → create user (+ workspace), log in, 200 {user}
- POST /auth/login → email/password → session cookie, {user}
- POST /auth/logout → revoke session, clear cookie
- GET /auth/user → current user, or 401

The session token only ever travels in the httpOnly cookie; response
bodies never contain it.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Cookie, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from datagov.auth.dependencies import get_current_user
from datagov.auth.sessions import (
    CurrentUser,
    SessionStore,
    clear_session_cookie,
    set_session_cookie,
)
from datagov.config import settings
from datagov.db.engine import get_db
from datagov.schemas.auth import LoginRequest, RegisterRequest, UserResponse
from datagov.schemas.common import MessageResponse
from datagov.services.user_service import UserService

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


async def _open_session(db: AsyncSession, request: Request, response: Response, user_id) -> None:
    token = await SessionStore(db).create(
        user_id,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    await db.commit()
    set_session_cookie(response, token)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=UserResponse)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Create an account (and optionally a workspace it owns), then log in."""
    user = await UserService(db).register(
        email=body.email,
        password=body.password,
        name=body.name,
        workspace_name=body.workspace_name,
    )
    await _open_session(db, request, response, user.id)
    return {"user": user}


# ─── Login / logout ──────────────────────────────────────


@router.post("/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Check credentials and open a session."""
    user = await UserService(db).authenticate(body.email, body.password)
    await _open_session(db, request, response, user.id)
    logger.info("user.logged_in", user_id=str(user.id))
    return {"user": user}


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    session_token: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    db: AsyncSession = Depends(get_db),
):
    """End the current session. Succeeds without one too."""
    if session_token and await SessionStore(db).revoke(session_token):
        await db.commit()
    clear_session_cookie(response)
    return {"message": "Logged out successfully"}


# ─── Current user ───────────────────────────────────────


@router.get("/user", response_model=UserResponse)
async def get_user(user: CurrentUser = Depends(get_current_user)):
    return {"user": user}
