# Vault - Credential Repository
#
# CRUD over the ``passwords`` table. Every call passes through the
# SessionGuard; only the password field is encrypted, and it is only
# decrypted on explicit request.

import logging
import sqlite3
import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from ..core.audit_log import EventSeverity, EventType, get_audit_logger, log_security_event
from .encryption import VaultCipher
from .exceptions import AuthFailure, InvalidInput, NotFound, StorageFailure
from .session import SessionGuard

logger = logging.getLogger(__name__)


@dataclass
class CredentialRecord:
    """A stored credential; encrypted_password stays base64 ciphertext."""
    id: int
    title: str
    username: str
    encrypted_password: str
    category: Optional[str] = None
    notes: Optional[str] = None
    last_accessed: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CredentialRepository:
    """
    Session-gated access to stored credentials.

    Args:
        conn: Shared SQLite connection
        guard: Session guard lending out the live key
        lock: Lock serialising every use of ``conn``

    Lock order: guard lock (via access()) first, then the store lock.
    """

    _COLUMNS = "id, title, username, encrypted_password, category, notes, last_accessed"

    def __init__(
        self,
        conn: sqlite3.Connection,
        guard: SessionGuard,
        lock: Optional[threading.RLock] = None,
    ):
        self.conn = conn
        self.guard = guard
        self._lock = lock or threading.RLock()

    def init_schema(self) -> None:
        with self._lock:
            try:
                self.conn.execute("""
                    CREATE TABLE IF NOT EXISTS passwords (
                        id INTEGER PRIMARY KEY,
                        title TEXT NOT NULL,
                        username TEXT NOT NULL,
                        encrypted_password TEXT NOT NULL,
                        category TEXT,
                        notes TEXT,
                        last_accessed TEXT
                    )
                """)
                self.conn.commit()
            except sqlite3.Error as e:
                raise StorageFailure(f"Failed to create passwords table: {e}") from e

    @staticmethod
    def _row_to_record(row) -> CredentialRecord:
        return CredentialRecord(
            id=row[0],
            title=row[1],
            username=row[2],
            encrypted_password=row[3],
            category=row[4],
            notes=row[5],
            last_accessed=row[6],
        )

    def list(self) -> List[CredentialRecord]:
        """All stored records, ordered by id, passwords still encrypted."""
        with self.guard.access():
            with self._lock:
                try:
                    rows = self.conn.execute(
                        f"SELECT {self._COLUMNS} FROM passwords ORDER BY id"
                    ).fetchall()
                except sqlite3.Error as e:
                    raise StorageFailure(f"Failed to list passwords: {e}") from e

        return [self._row_to_record(row) for row in rows]

    def add(
        self,
        title: str,
        username: str,
        password: str,
        category: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """
        Encrypt password under the live key and store a new record.

        Returns:
            The store-assigned record id

        Raises:
            InvalidInput: A field cannot be encoded as UTF-8
        """
        with self.guard.access() as key:
            encrypted = VaultCipher.encrypt(key, password)
            with self._lock:
                try:
                    cursor = self.conn.execute(
                        "INSERT INTO passwords (title, username, encrypted_password, category, notes) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (title, username, encrypted, category, notes),
                    )
                    self.conn.commit()
                except UnicodeEncodeError as e:
                    raise InvalidInput(f"Record fields must be valid UTF-8: {e.reason}") from e
                except sqlite3.Error as e:
                    self.conn.rollback()
                    raise StorageFailure(f"Failed to add password: {e}") from e
                password_id = cursor.lastrowid

        get_audit_logger().log_vault_event(
            event_type=EventType.VAULT_PASSWORD_ADDED,
            message=f"Password added: {title}",
            details={"password_id": password_id, "category": category},
        )
        return password_id

    def decrypt(self, password_id: int) -> str:
        """
        Return the plaintext password of a record.

        Raises:
            SessionExpired: No valid session
            NotFound: No record with that id
            AuthFailure: Tag check failed (different key or corrupted data)
        """
        with self.guard.access() as key:
            with self._lock:
                try:
                    row = self.conn.execute(
                        "SELECT title, encrypted_password FROM passwords WHERE id = ?",
                        (password_id,),
                    ).fetchone()
                except sqlite3.Error as e:
                    raise StorageFailure(f"Failed to read password: {e}") from e

            if row is None:
                raise NotFound(f"Password {password_id} not found")

            try:
                plaintext = VaultCipher.decrypt(key, row[1])
            except AuthFailure:
                log_security_event(
                    EventType.VAULT_ERROR,
                    EventSeverity.CRITICAL,
                    "Stored password failed integrity check",
                    details={"password_id": password_id},
                )
                raise

        get_audit_logger().log_vault_event(
            event_type=EventType.VAULT_PASSWORD_ACCESSED,
            message=f"Password accessed: {row[0]}",
            details={"password_id": password_id},
        )
        return plaintext

    def delete(self, password_id: int) -> None:
        """Remove a record; unknown ids are a no-op."""
        with self.guard.access():
            with self._lock:
                try:
                    cursor = self.conn.execute(
                        "DELETE FROM passwords WHERE id = ?", (password_id,)
                    )
                    self.conn.commit()
                except sqlite3.Error as e:
                    self.conn.rollback()
                    raise StorageFailure(f"Failed to delete password: {e}") from e

        if cursor.rowcount:
            get_audit_logger().log_vault_event(
                event_type=EventType.VAULT_PASSWORD_DELETED,
                message="Password deleted",
                details={"password_id": password_id},
            )
        else:
            logger.debug("Delete of unknown password id %s ignored", password_id)
