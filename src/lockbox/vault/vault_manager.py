# Vault Manager - Explicit vault context
#
# Owns the shared SQLite connection, the lock serialising it, and the
# SessionGuard, and wires the AuthenticationManager and
# CredentialRepository around them. One VaultManager per vault file;
# callers pass it around instead of reaching for process globals.

import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Callable, Optional, Union

from ..core.config import VaultSettings
from ..core.db import connect as db_connect
from .auth_manager import AuthenticationManager
from .encryption import KeyDerivation, MasterPasswordHasher
from .exceptions import StorageFailure
from .master_store import MasterCredentialStore
from .repository import CredentialRepository
from .session import SessionGuard

logger = logging.getLogger(__name__)


class VaultManager:
    """
    Vault context: storage, session and the components built on them.

    Security:
    - Password fields encrypted with AES-256-GCM under a PBKDF2-derived key
    - Master password verified via a stored Argon2id hash
    - Session key wiped on logout, inactivity timeout and close()

    Args:
        vault_path: SQLite file (or ":memory:"). Defaults to settings.db_path.
        settings: Work factors and timeout. Defaults to VaultSettings().
        clock: Monotonic time source for the session timeout.
    """

    def __init__(
        self,
        vault_path: Optional[Union[str, Path]] = None,
        settings: Optional[VaultSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or VaultSettings()
        self.vault_path = Path(vault_path) if vault_path is not None else Path(self.settings.db_path)
        if str(self.vault_path) != ":memory:":
            self.vault_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.RLock()
        try:
            self.conn = db_connect(self.vault_path, check_same_thread=False)
        except sqlite3.Error as e:
            raise StorageFailure(f"Cannot open vault database {self.vault_path}: {e}") from e

        self.guard = SessionGuard(timeout=self.settings.session_timeout, clock=clock)
        self.master_store = MasterCredentialStore(self.conn, self._lock)
        self.credentials = CredentialRepository(self.conn, self.guard, self._lock)

        self.master_store.init_schema()
        self.credentials.init_schema()

        self.auth = AuthenticationManager(
            store=self.master_store,
            guard=self.guard,
            kdf=KeyDerivation(iterations=self.settings.pbkdf2_iterations),
            hasher=MasterPasswordHasher(
                time_cost=self.settings.argon2_time_cost,
                memory_cost=self.settings.argon2_memory_cost,
                parallelism=self.settings.argon2_parallelism,
            ),
        )

        logger.info("Vault opened at %s", self.vault_path)

    def __enter__(self) -> "VaultManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Wipe the session key and close the database connection."""
        self.guard.clear()
        with self._lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
        logger.info("Vault closed")
