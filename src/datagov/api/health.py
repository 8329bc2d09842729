"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running and the
database is reachable. A failing database degrades the status instead
of failing the request, so load balancers can still read the body.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from datagov import __version__
from datagov.db.engine import get_db

router = APIRouter()

_STARTED = time.monotonic()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        database = f"error: {e.__class__.__name__}"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED, 3),
        "version": __version__,
        "database": database,
    }
