"""Server-side login sessions.

Learn: Login creates a row in user_sessions and hands the client an opaque
random token in an httpOnly cookie. Only the token's SHA-256 is stored.
Every request looks the token up again and joins to the live user row —
a deleted session (logout) or an expired one stops working immediately.
"""

import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from datagov.config import settings
from datagov.db.models import User, UserSession, utcnow


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated identity making the request."""

    id: uuid.UUID
    email: str
    name: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(id=user.id, email=user.email, name=user.name)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class SessionStore:
    """Create, resolve and revoke sessions in the database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        user_id: uuid.UUID,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> str:
        """Open a session for `user_id`. Returns the raw token (not stored)."""
        token = secrets.token_urlsafe(32)
        session = UserSession(
            user_id=user_id,
            token_hash=hash_token(token),
            ip_address=ip_address,
            user_agent=(user_agent or "")[:255] or None,
            expires_at=utcnow() + timedelta(hours=settings.session_ttl_hours),
        )
        self.db.add(session)
        await self.db.flush()
        return token

    async def resolve(self, token: str) -> Optional[CurrentUser]:
        """Token → live user, or None if unknown or expired."""
        result = await self.db.execute(
            select(User)
            .join(UserSession, UserSession.user_id == User.id)
            .where(
                UserSession.token_hash == hash_token(token),
                UserSession.expires_at > utcnow(),
            )
        )
        user = result.scalars().first()
        return CurrentUser.from_user(user) if user else None

    async def revoke(self, token: str) -> bool:
        """Delete the session for `token`. Returns whether one existed."""
        result = await self.db.execute(
            delete(UserSession).where(UserSession.token_hash == hash_token(token))
        )
        return result.rowcount > 0


# ─── Cookie helpers ─────────────────────────────────────


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
