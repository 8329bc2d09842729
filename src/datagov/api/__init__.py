"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Health and auth are open. Tenant listing/creation needs a session
(get_current_user on the route). Every route under /tenants/{tenant_id}
declares its own require_permission() entry, so there is no blanket
router-level dependency to forget or double up.
"""

from fastapi import APIRouter

from datagov.api.api_keys import router as api_keys_router
from datagov.api.auth import router as auth_router
from datagov.api.datasets import router as datasets_router
from datagov.api.health import router as health_router
from datagov.api.jobs import router as jobs_router
from datagov.api.members import router as members_router
from datagov.api.tenants import router as tenants_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(tenants_router, tags=["tenants"])
api_router.include_router(datasets_router, tags=["datasets"])
api_router.include_router(jobs_router, tags=["jobs"])
api_router.include_router(members_router, tags=["members"])
api_router.include_router(api_keys_router, tags=["api-keys"])
