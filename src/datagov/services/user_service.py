"""User service — registration and credential checks.

Learn: Registration is one transaction: user row, optional workspace,
owner membership. If any insert fails (e.g. the workspace slug is taken)
nothing is committed and the error handler reports the conflict.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from datagov.auth.password import hash_password, verify_password
from datagov.auth.roles import OWNER
from datagov.db.models import Tenant, TenantMember, User
from datagov.errors import Conflict, InvalidCredentials
from datagov.utils import generate_slug

logger = structlog.get_logger()


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalars().first()

    async def register(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        workspace_name: Optional[str] = None,
    ) -> User:
        email = email.lower()
        if await self.get_by_email(email):
            raise Conflict("User already exists")

        user = User(
            email=email,
            password_hash=hash_password(password),
            name=name or email.split("@")[0],
        )
        self.db.add(user)
        await self.db.flush()

        if workspace_name:
            tenant = Tenant(name=workspace_name, slug=generate_slug(workspace_name))
            self.db.add(tenant)
            await self.db.flush()
            self.db.add(TenantMember(tenant_id=tenant.id, user_id=user.id, role=OWNER))
            await self.db.flush()
            logger.info("tenant.created", tenant_id=str(tenant.id), slug=tenant.slug)

        logger.info("user.registered", user_id=str(user.id))
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user for valid credentials, else raise InvalidCredentials.

        Unknown email and wrong password produce the same error.
        """
        user = await self.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        return user
