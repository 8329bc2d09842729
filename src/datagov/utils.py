"""Small helpers shared by services: slugs, secrets, redaction."""

import re
import secrets

API_KEY_PREFIX = "dgk_"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(name: str) -> str:
    """Lowercase, runs of non-alphanumerics → "-", e.g. Acme Corp! → acme-corp."""
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def generate_api_key() -> str:
    return f"{API_KEY_PREFIX}{secrets.token_hex(32)}"


def generate_invitation_token() -> str:
    return secrets.token_hex(32)


def redact_key(key: str) -> str:
    """Show only the first 8 and last 4 characters of a secret."""
    return f"{key[:8]}...{key[-4:]}"
