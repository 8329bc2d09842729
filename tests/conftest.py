"""Test fixtures — a fresh SQLite database and app per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI without a Postgres
server:

1. Each test gets its own SQLite file under tmp_path, with the schema
   created straight from the ORM metadata (foreign keys switched on by
   build_engine, so ON DELETE CASCADE behaves like Postgres).
2. The app's get_db dependency yields sessions from that engine, and the
   job runner is replaced with one (delay 0) bound to the same engine.
3. Auth is NOT mocked. Each `signup()` call returns a separate client
   that registered for real and keeps its own session cookie, so
   permission tests exercise the actual session → guard → handler path.

Settings are read at import time, so the environment is fixed before any
datagov import.
"""

import os

os.environ["DATAGOV_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DATAGOV_ENVIRONMENT"] = "development"
os.environ["DATAGOV_BCRYPT_ROUNDS"] = "4"
os.environ["DATAGOV_LOG_LEVEL"] = "WARNING"

import uuid  # noqa: E402
from dataclasses import dataclass  # noqa: E402
from typing import Optional  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import update  # noqa: E402

from datagov.api.jobs import get_job_runner  # noqa: E402
from datagov.db.engine import build_engine, build_session_factory, get_db  # noqa: E402
from datagov.db.models import Base, TenantMember  # noqa: E402
from datagov.main import create_app  # noqa: E402
from datagov.services.job_runner import JobRunner  # noqa: E402

PASSWORD = "password123"


@dataclass
class Account:
    """A registered user plus the HTTP client holding their session."""

    client: AsyncClient
    user: dict
    email: str
    tenant_id: Optional[str] = None


@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Direct DB access for arranging or inspecting state."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def job_runner(session_factory):
    runner = JobRunner(session_factory, delay=0)
    yield runner
    await runner.shutdown()


@pytest_asyncio.fixture()
async def app(session_factory, job_runner):
    app = create_app()
    app.state.job_runner = job_runner

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_job_runner] = lambda: job_runner
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def make_client(app):
    """Factory for independent clients (separate cookie jars)."""
    clients: list[AsyncClient] = []

    def _make() -> AsyncClient:
        c = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
        clients.append(c)
        return c

    yield _make

    for c in clients:
        await c.aclose()


@pytest_asyncio.fixture()
async def client(make_client):
    """Anonymous client."""
    return make_client()


@pytest_asyncio.fixture()
async def signup(make_client):
    """Register a fresh user on their own client.

    With `workspace`, the user also becomes owner of a new tenant and
    `tenant_id` is filled in.
    """

    async def _signup(name: str = "user", workspace: Optional[str] = None) -> Account:
        c = make_client()
        email = f"{name}-{uuid.uuid4().hex[:8]}@example.com"
        body = {"email": email, "password": PASSWORD, "name": name}
        if workspace:
            body["workspaceName"] = workspace
        r = await c.post("/api/auth/register", json=body)
        assert r.status_code == 200, r.text
        account = Account(client=c, user=r.json()["user"], email=email)
        if workspace:
            r = await c.get("/api/tenants")
            account.tenant_id = r.json()["tenants"][0]["id"]
        return account

    return _signup


@pytest_asyncio.fixture()
async def add_member():
    """Have `owner` add an existing account to owner's tenant with `role`."""

    async def _add(owner: Account, account: Account, role: str = "member") -> None:
        r = await owner.client.post(
            f"/api/tenants/{owner.tenant_id}/members/invite",
            json={"email": account.email, "role": role},
        )
        assert r.status_code == 200, r.text
        assert r.json() == {"message": "User added to workspace"}
        account.tenant_id = owner.tenant_id

    return _add


@pytest_asyncio.fixture()
async def make_owner(db_session):
    """Promote an existing member to owner directly in the database.

    The members API never grants ownership, so tests that need two owners
    arrange it here.
    """

    async def _promote(account: Account) -> None:
        await db_session.execute(
            update(TenantMember)
            .where(
                TenantMember.tenant_id == uuid.UUID(account.tenant_id),
                TenantMember.user_id == uuid.UUID(account.user["id"]),
            )
            .values(role="owner")
        )
        await db_session.commit()

    return _promote


@dataclass
class Workspace:
    owner: Account
    admin: Account
    member: Account
    outsider: Account

    @property
    def tenant_id(self) -> str:
        return self.owner.tenant_id

    def as_role(self, role: str) -> Account:
        return {"owner": self.owner, "admin": self.admin, "member": self.member}[role]


@pytest_asyncio.fixture()
async def workspace(signup, add_member) -> Workspace:
    """One tenant with an owner, an admin and a member, plus a stranger."""
    owner = await signup("owner", workspace=f"Workspace {uuid.uuid4().hex[:6]}")
    admin = await signup("admin")
    member = await signup("member")
    outsider = await signup("outsider", workspace=f"Elsewhere {uuid.uuid4().hex[:6]}")
    await add_member(owner, admin, "admin")
    await add_member(owner, member, "member")
    return Workspace(owner=owner, admin=admin, member=member, outsider=outsider)
