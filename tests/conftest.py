"""
Shared pytest fixtures for the Lockbox test suite.

Autouse fixtures below isolate tests from the live application data:
  - Audit logger -> temp directory  (prevents test events in ./audit_logs)
  - Settings     -> cheap KDF / Argon2 parameters, temp database path
  - API commands -> reset so each test opens its own vault
"""

import pytest

from lockbox.core.config import VaultSettings


class FakeClock:
    """Manually advanced monotonic clock for session timeout tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolate_audit_logs(tmp_path):
    """Redirect the global AuditLogger to a temp directory for every test.

    Without this, any test that (directly or indirectly) calls
    ``get_audit_logger().log_event(...)`` writes into the real
    ``./audit_logs/`` directory.
    """
    import lockbox.core.audit_log as audit_mod

    old_logger = audit_mod._audit_logger
    audit_mod._audit_logger = audit_mod.AuditLogger(log_dir=tmp_path / "audit_logs")

    yield

    audit_mod._audit_logger.close()
    audit_mod._audit_logger = old_logger


@pytest.fixture
def fast_settings(tmp_path):
    """Settings with test-speed work factors (never use these for real)."""
    return VaultSettings(
        db_path=tmp_path / "passwords.db",
        audit_log_dir=tmp_path / "audit_logs",
        session_timeout=900,
        pbkdf2_iterations=1_000,
        argon2_time_cost=1,
        argon2_memory_cost=8,
        argon2_parallelism=1,
    )


@pytest.fixture(autouse=True)
def _isolate_settings(fast_settings):
    """Make get_settings() return the fast test settings."""
    from lockbox.core import config as config_mod

    old_settings = config_mod._settings
    config_mod._settings = fast_settings

    yield

    config_mod._settings = old_settings


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def vault(fast_settings, clock):
    """A fresh VaultManager on a temp database with a fake clock."""
    from lockbox.vault import VaultManager

    manager = VaultManager(settings=fast_settings, clock=clock)
    yield manager
    manager.close()
