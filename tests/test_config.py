"""Tests for VaultSettings environment loading and the audit logger."""

import json
from pathlib import Path

import pytest

from lockbox.core.audit_log import AuditLogger, EventSeverity, EventType, get_audit_logger
from lockbox.core.config import (
    DEFAULT_PBKDF2_ITERATIONS,
    DEFAULT_SESSION_TIMEOUT_SECONDS,
    VaultSettings,
)

_VARS = [
    "LOCKBOX_DB_PATH",
    "LOCKBOX_AUDIT_LOG_DIR",
    "LOCKBOX_SESSION_TIMEOUT",
    "LOCKBOX_PBKDF2_ITERATIONS",
    "LOCKBOX_ARGON2_TIME_COST",
    "LOCKBOX_ARGON2_MEMORY_COST",
    "LOCKBOX_ARGON2_PARALLELISM",
    "LOCKBOX_HOST",
    "LOCKBOX_PORT",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in _VARS:
        # setenv first so teardown also drops values loaded from .env files
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # .env discovery starts from the working directory
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestVaultSettings:
    def test_defaults(self, clean_env):
        settings = VaultSettings.from_env()
        assert settings.db_path == Path("data/passwords.db")
        assert settings.session_timeout == DEFAULT_SESSION_TIMEOUT_SECONDS == 900
        assert settings.pbkdf2_iterations == DEFAULT_PBKDF2_ITERATIONS
        assert settings.host == "127.0.0.1"
        assert settings.port == 8000

    def test_env_overrides(self, clean_env, tmp_path):
        clean_env.setenv("LOCKBOX_DB_PATH", str(tmp_path / "v.db"))
        clean_env.setenv("LOCKBOX_SESSION_TIMEOUT", "60")
        clean_env.setenv("LOCKBOX_PORT", "9001")
        settings = VaultSettings.from_env()
        assert settings.db_path == tmp_path / "v.db"
        assert settings.session_timeout == 60
        assert settings.port == 9001

    def test_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("LOCKBOX_SESSION_TIMEOUT=120\n")
        assert VaultSettings.from_env(str(env_file)).session_timeout == 120

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("LOCKBOX_SESSION_TIMEOUT=120\n")
        clean_env.setenv("LOCKBOX_SESSION_TIMEOUT", "30")
        assert VaultSettings.from_env(str(env_file)).session_timeout == 30

    @pytest.mark.parametrize("value", ["abc", "0", "-5"])
    def test_invalid_integer(self, clean_env, value):
        clean_env.setenv("LOCKBOX_SESSION_TIMEOUT", value)
        with pytest.raises(ValueError, match="LOCKBOX_SESSION_TIMEOUT"):
            VaultSettings.from_env()


class TestAuditLogger:
    def test_writes_json_event(self, tmp_path):
        logger = AuditLogger(log_dir=tmp_path / "logs")
        try:
            event_id = logger.log_event(
                EventType.VAULT_UNLOCKED, EventSeverity.INFO, "Vault unlocked", details={"x": 1}
            )
        finally:
            logger.close()

        lines = logger.log_file.read_text(encoding="utf-8").strip().splitlines()
        event = json.loads(lines[-1])
        assert event["event_id"] == event_id
        assert event["event_type"] == "vault.unlocked"
        assert event["details"] == {"x": 1}

    def test_vault_flow_never_logs_secrets(self, vault):
        vault.auth.setup("Correct Horse")
        password_id = vault.credentials.add("Email", "me@x.com", "p@ss-secret")
        vault.credentials.decrypt(password_id)
        vault.auth.logout()
        vault.auth.authenticate("Wrong Horse")

        contents = get_audit_logger().log_file.read_text(encoding="utf-8")
        assert "vault.created" in contents
        assert "vault.password.accessed" in contents
        assert "vault.unlock.failed" in contents
        assert "Correct Horse" not in contents
        assert "Wrong Horse" not in contents
        assert "p@ss-secret" not in contents
        assert vault.master_store.load().salt not in contents
