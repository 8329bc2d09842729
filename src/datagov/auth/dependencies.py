"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to resolve the
session cookie into a CurrentUser. The session is looked up in the
database on every request — there is no in-process identity cache to
go stale after logout.
"""

from typing import Optional

from fastapi import Cookie, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from datagov.auth.sessions import CurrentUser, SessionStore
from datagov.config import settings
from datagov.db.engine import get_db
from datagov.errors import Unauthorized


async def get_current_user_optional(
    session_token: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    db: AsyncSession = Depends(get_db),
) -> Optional[CurrentUser]:
    """Resolve the session cookie (optional — returns None if no session).

    Learn: This is the "soft" auth dependency. The tenant guard uses it so
    it can raise its own Unauthorized as step one of its checks.
    """
    if not session_token:
        return None
    return await SessionStore(db).resolve(session_token)


async def get_current_user(
    user: Optional[CurrentUser] = Depends(get_current_user_optional),
) -> CurrentUser:
    """Resolve the session cookie (required — 401 if no live session)."""
    if user is None:
        raise Unauthorized()
    return user
