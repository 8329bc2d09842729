"""Roles and the per-operation permission table.

Learn: Roles rank owner > admin > member, but routes don't ask for a
minimum rank — each operation lists exactly which roles may call it.
A member can create and edit datasets yet can't delete them; only an
owner can change someone's role or delete the workspace.

Keep the table in one place: routes look up their entry by name via
auth.guard.require_permission(), and tests iterate it.
"""

OWNER = "owner"
ADMIN = "admin"
MEMBER = "member"

ROLES = (OWNER, ADMIN, MEMBER)

_ANY = frozenset(ROLES)
_MANAGERS = frozenset({OWNER, ADMIN})
_OWNER_ONLY = frozenset({OWNER})

PERMISSIONS: dict[str, frozenset[str]] = {
    # Tenants
    "tenant.read": _ANY,
    "tenant.update": _MANAGERS,
    "tenant.delete": _OWNER_ONLY,
    # Datasets
    "dataset.list": _ANY,
    "dataset.read": _ANY,
    "dataset.create": _ANY,
    "dataset.update": _ANY,
    "dataset.delete": _MANAGERS,
    # Jobs
    "job.list": _ANY,
    "job.read": _ANY,
    "job.create": _MANAGERS,
    "job.update": _MANAGERS,
    "job.delete": _MANAGERS,
    "job.run": _ANY,
    "job.runs": _ANY,
    # Members
    "member.list": _ANY,
    "member.invite": _MANAGERS,
    "member.remove": _MANAGERS,
    "member.change_role": _OWNER_ONLY,
    # API keys
    "api_key.list": _MANAGERS,
    "api_key.create": _MANAGERS,
    "api_key.revoke": _MANAGERS,
}


def allowed_roles(permission: str) -> frozenset[str]:
    """Roles accepted for `permission`. Unknown names are a programming error."""
    try:
        return PERMISSIONS[permission]
    except KeyError:
        raise ValueError(f"Unknown permission: {permission}") from None
