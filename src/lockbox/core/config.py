# Core - Configuration
#
# Runtime settings read from the environment (optionally seeded from a
# .env file in the working directory). Every knob has a safe default so
# a bare `python -m lockbox` works out of the box.

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

# Inactivity window after which the session key is discarded
DEFAULT_SESSION_TIMEOUT_SECONDS = 15 * 60

# OWASP 2023: 600k iterations for PBKDF2-SHA256
DEFAULT_PBKDF2_ITERATIONS = 600_000

# Argon2id verification hash parameters (RFC 9106 "second recommended")
DEFAULT_ARGON2_TIME_COST = 3
DEFAULT_ARGON2_MEMORY_COST = 64 * 1024  # KiB
DEFAULT_ARGON2_PARALLELISM = 4


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass
class VaultSettings:
    """Vault configuration.

    Attributes:
        db_path: SQLite file holding the passwords and master_auth tables
        audit_log_dir: Directory for daily audit log files
        session_timeout: Inactivity timeout in seconds
        pbkdf2_iterations: Encryption key derivation work factor
        argon2_time_cost: Argon2id passes for the verification hash
        argon2_memory_cost: Argon2id memory in KiB
        argon2_parallelism: Argon2id lanes
        host: Bind address for the local API server
        port: Port for the local API server
    """
    db_path: Path = Path("data/passwords.db")
    audit_log_dir: Path = Path("./audit_logs")
    session_timeout: int = DEFAULT_SESSION_TIMEOUT_SECONDS
    pbkdf2_iterations: int = DEFAULT_PBKDF2_ITERATIONS
    argon2_time_cost: int = DEFAULT_ARGON2_TIME_COST
    argon2_memory_cost: int = DEFAULT_ARGON2_MEMORY_COST
    argon2_parallelism: int = DEFAULT_ARGON2_PARALLELISM
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "VaultSettings":
        """Build settings from LOCKBOX_* environment variables.

        Values already present in the environment win over the .env file.
        """
        load_dotenv(env_file or find_dotenv(usecwd=True))
        return cls(
            db_path=Path(os.environ.get("LOCKBOX_DB_PATH", "data/passwords.db")),
            audit_log_dir=Path(os.environ.get("LOCKBOX_AUDIT_LOG_DIR", "./audit_logs")),
            session_timeout=_env_int("LOCKBOX_SESSION_TIMEOUT", DEFAULT_SESSION_TIMEOUT_SECONDS),
            pbkdf2_iterations=_env_int("LOCKBOX_PBKDF2_ITERATIONS", DEFAULT_PBKDF2_ITERATIONS),
            argon2_time_cost=_env_int("LOCKBOX_ARGON2_TIME_COST", DEFAULT_ARGON2_TIME_COST),
            argon2_memory_cost=_env_int("LOCKBOX_ARGON2_MEMORY_COST", DEFAULT_ARGON2_MEMORY_COST),
            argon2_parallelism=_env_int("LOCKBOX_ARGON2_PARALLELISM", DEFAULT_ARGON2_PARALLELISM),
            host=os.environ.get("LOCKBOX_HOST", "127.0.0.1"),
            port=_env_int("LOCKBOX_PORT", 8000),
        )


# ── Singleton ────────────────────────────────────────────────────────

_settings: Optional[VaultSettings] = None


def get_settings() -> VaultSettings:
    """Get or create the process-wide settings."""
    global _settings
    if _settings is None:
        _settings = VaultSettings.from_env()
    return _settings


def set_settings(settings: Optional[VaultSettings]) -> None:
    """Replace the singleton (for testing and CLI overrides)."""
    global _settings
    _settings = settings
