"""Settings tests — env loading and production guard rails."""

import pytest
from pydantic import ValidationError

from datagov.config import Settings


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("DATAGOV_PORT", "8123")
    monkeypatch.setenv("DATAGOV_JOB_RUN_DELAY_SECONDS", "2.5")
    s = Settings()
    assert s.port == 8123
    assert s.job_run_delay_seconds == 2.5


def test_defaults():
    s = Settings(database_url="sqlite+aiosqlite:///:memory:")
    assert s.session_cookie_name == "datagov_session"
    assert s.invitation_expire_days == 7


def test_production_requires_secure_cookie():
    with pytest.raises(ValidationError):
        Settings(environment="production", session_cookie_secure=False)


def test_production_with_secure_cookie():
    s = Settings(environment="production", session_cookie_secure=True)
    assert s.environment == "production"
