# Vault - Master Credential Store
#
# Persists the one-and-only master credential record:
# Argon2id verification hash, installation salt, creation time.
#
# The singleton invariant lives in the schema (fixed primary key with a
# CHECK constraint), so a second insert fails inside SQLite itself rather
# than relying on a separate exists() check.

import logging
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .exceptions import AlreadyExists, NotFound, StorageFailure

logger = logging.getLogger(__name__)

MASTER_ROW_ID = 1


@dataclass(frozen=True)
class MasterCredential:
    """The stored master credential (never contains the password itself)."""
    password_hash: str
    salt: str
    created_at: str

    def __repr__(self) -> str:
        return f"MasterCredential(created_at={self.created_at!r})"


class MasterCredentialStore:
    """
    Access to the ``master_auth`` table.

    Args:
        conn: Shared SQLite connection
        lock: Lock serialising every use of ``conn``
    """

    def __init__(self, conn: sqlite3.Connection, lock: Optional[threading.RLock] = None):
        self.conn = conn
        self._lock = lock or threading.RLock()

    def init_schema(self) -> None:
        with self._lock:
            try:
                self.conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS master_auth (
                        id INTEGER PRIMARY KEY CHECK (id = {MASTER_ROW_ID}),
                        password_hash TEXT NOT NULL,
                        salt TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                """)
                self.conn.commit()
            except sqlite3.Error as e:
                raise StorageFailure(f"Failed to create master_auth table: {e}") from e

    def exists(self) -> bool:
        """True if a master credential has been stored."""
        with self._lock:
            try:
                row = self.conn.execute(
                    "SELECT 1 FROM master_auth WHERE id = ?", (MASTER_ROW_ID,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StorageFailure(f"Failed to read master credential: {e}") from e
        return row is not None

    def create(self, password_hash: str, salt: str, created_at: Optional[datetime] = None) -> None:
        """
        Insert the master credential.

        Raises:
            AlreadyExists: A master credential is already stored
            StorageFailure: Any other SQLite error
        """
        created_at = created_at or datetime.utcnow()
        with self._lock:
            try:
                self.conn.execute(
                    "INSERT INTO master_auth (id, password_hash, salt, created_at) VALUES (?, ?, ?, ?)",
                    (MASTER_ROW_ID, password_hash, salt, created_at.isoformat()),
                )
                self.conn.commit()
            except sqlite3.IntegrityError:
                self.conn.rollback()
                raise AlreadyExists("Master credential already exists")
            except sqlite3.Error as e:
                self.conn.rollback()
                raise StorageFailure(f"Failed to store master credential: {e}") from e

        logger.info("Master credential created")

    def load(self) -> MasterCredential:
        """
        Fetch the master credential.

        Raises:
            NotFound: No master credential stored yet
        """
        with self._lock:
            try:
                row = self.conn.execute(
                    "SELECT password_hash, salt, created_at FROM master_auth WHERE id = ?",
                    (MASTER_ROW_ID,),
                ).fetchone()
            except sqlite3.Error as e:
                raise StorageFailure(f"Failed to read master credential: {e}") from e

        if row is None:
            raise NotFound("No master credential stored")

        return MasterCredential(password_hash=row[0], salt=row[1], created_at=row[2])
