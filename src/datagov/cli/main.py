"""datagov CLI — run the server, create the schema, seed a dev account, probe health.

Usage:
    datagov serve --reload                 # Run the API with uvicorn
    datagov init-db                        # Create all tables from the ORM models
    datagov seed                           # test@example.com / password123 owning "My Workspace"
    datagov health                         # GET /api/health on a running server
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from datagov import __version__
from datagov.config import settings

SEED_EMAIL = "test@example.com"
SEED_PASSWORD = "password123"
SEED_NAME = "Test User"
SEED_WORKSPACE = "My Workspace"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _api_url() -> str:
    return os.environ.get("DATAGOV_API_URL", f"http://localhost:{settings.port}").rstrip("/")


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. CliRunner inside an async test) by
    offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _database_option(fn):
    return click.option(
        "--database-url",
        default=None,
        help="Override DATAGOV_DATABASE_URL",
    )(fn)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="datagov")
def cli():
    """datagov — multi-tenant data governance API."""


# ---------------------------------------------------------------------------
# datagov serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", default=None, help="Bind address (default: DATAGOV_HOST)")
@click.option("--port", "-p", default=None, type=int, help="Port (default: DATAGOV_PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes (development)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "datagov.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# datagov init-db
# ---------------------------------------------------------------------------


@cli.command("init-db")
@_database_option
def init_db(database_url: Optional[str]):
    """Create every table from the ORM metadata (no-op for existing tables)."""
    _run(_init_db_impl(database_url or settings.database_url))
    click.secho("Database schema created.", fg="green")


async def _init_db_impl(database_url: str) -> None:
    from datagov.db.engine import build_engine
    from datagov.db.models import Base

    engine = build_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# datagov seed
# ---------------------------------------------------------------------------


@cli.command()
@_database_option
def seed(database_url: Optional[str]):
    """Create a development account that owns one workspace."""
    created = _run(_seed_impl(database_url or settings.database_url))
    if not created:
        click.secho(f"{SEED_EMAIL} already exists, nothing to do.", fg="yellow")
        return
    click.secho("Seeded development data:", fg="green")
    click.echo(f"  Email:     {SEED_EMAIL}")
    click.echo(f"  Password:  {SEED_PASSWORD}")
    click.echo(f"  Workspace: {SEED_WORKSPACE}")


async def _seed_impl(database_url: str) -> bool:
    from datagov.db.engine import build_engine, build_session_factory
    from datagov.services.user_service import UserService

    engine = build_engine(database_url)
    try:
        async with build_session_factory(engine)() as db:
            svc = UserService(db)
            if await svc.get_by_email(SEED_EMAIL):
                return False
            await svc.register(
                email=SEED_EMAIL,
                password=SEED_PASSWORD,
                name=SEED_NAME,
                workspace_name=SEED_WORKSPACE,
            )
            await db.commit()
            return True
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# datagov health
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--api-url", default=None, help="Server base URL (default: DATAGOV_API_URL)")
def health(api_url: Optional[str]):
    """Query /api/health on a running server."""
    data = _run(_health_impl((api_url or _api_url()).rstrip("/")))
    color = "green" if data.get("status") == "healthy" else "yellow"
    click.secho(json.dumps(data, indent=2, default=str), fg=color)
    if data.get("status") != "healthy":
        sys.exit(1)


async def _health_impl(base_url: str) -> dict:
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as c:
        try:
            r = await c.get("/api/health")
            r.raise_for_status()
        except httpx.HTTPError as e:
            click.secho(f"Health check failed: {e}", fg="red", err=True)
            sys.exit(1)
        return r.json()


if __name__ == "__main__":
    cli()
