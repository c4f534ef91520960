# Vault - Authentication Manager
#
# Master password setup and verification. On success the derived
# encryption key is installed into the SessionGuard; a wrong password is
# a normal False result, never an exception.

from dataclasses import dataclass
from datetime import datetime

from ..core.audit_log import EventSeverity, EventType, get_audit_logger
from .encryption import KeyDerivation, MasterPasswordHasher, generate_salt
from .exceptions import AlreadyExists, AlreadySetUp, NotFound, SetupMissing
from .master_store import MasterCredentialStore
from .session import SessionGuard


@dataclass(frozen=True)
class AuthStatus:
    needs_setup: bool
    is_authenticated: bool

    def to_dict(self) -> dict:
        return {"needs_setup": self.needs_setup, "is_authenticated": self.is_authenticated}


class AuthenticationManager:
    """
    Orchestrates master password setup, verification and logout.

    Flow:
    1. setup(): random salt → Argon2id hash stored → PBKDF2 key installed
    2. authenticate(): Argon2id verify → same PBKDF2 key re-derived → installed
    3. logout(): key wiped, clock reset

    Args:
        store: Master credential persistence
        guard: Session key holder
        kdf: Encryption key derivation
        hasher: Verification hash scheme
    """

    def __init__(
        self,
        store: MasterCredentialStore,
        guard: SessionGuard,
        kdf: KeyDerivation,
        hasher: MasterPasswordHasher,
    ):
        self.store = store
        self.guard = guard
        self.kdf = kdf
        self.hasher = hasher

    def check_status(self) -> AuthStatus:
        """needs_setup iff no master record; is_authenticated iff record + valid session."""
        exists = self.store.exists()
        return AuthStatus(
            needs_setup=not exists,
            is_authenticated=exists and self.guard.is_valid(),
        )

    def setup(self, master_password: str) -> None:
        """
        Create the master credential and open a session.

        Raises:
            AlreadySetUp: A master credential already exists
        """
        if self.store.exists():
            raise AlreadySetUp("Master password already set up. Use authenticate instead.")

        salt = generate_salt()
        password_hash = self.hasher.hash(master_password, salt)

        try:
            self.store.create(password_hash, salt, datetime.utcnow())
        except AlreadyExists:
            # Lost a race against a concurrent setup
            raise AlreadySetUp("Master password already set up. Use authenticate instead.")

        self.guard.install(self.kdf.derive(master_password, salt))

        get_audit_logger().log_event(
            event_type=EventType.VAULT_CREATED,
            severity=EventSeverity.INFO,
            message="Vault initialized with master password"
        )

    def authenticate(self, master_password: str) -> bool:
        """
        Verify the master password and open a session.

        Returns:
            True on success, False on wrong password (no key installed,
            any open session is closed)

        Raises:
            SetupMissing: No master credential exists yet
        """
        try:
            record = self.store.load()
        except NotFound:
            raise SetupMissing("Master password not set up. Run setup first.")

        if not self.hasher.verify(record.password_hash, master_password):
            # A failed unlock leaves the vault locked, even if a session was open
            self.guard.clear()
            get_audit_logger().log_event(
                event_type=EventType.VAULT_UNLOCK_FAILED,
                severity=EventSeverity.ALERT,
                message="Vault unlock failed: incorrect master password"
            )
            return False

        self.guard.install(self.kdf.derive(master_password, record.salt))

        get_audit_logger().log_event(
            event_type=EventType.VAULT_UNLOCKED,
            severity=EventSeverity.INFO,
            message="Vault unlocked successfully"
        )
        return True

    def logout(self) -> None:
        """Wipe the session key. Always succeeds."""
        self.guard.clear()
        get_audit_logger().log_event(
            event_type=EventType.VAULT_LOCKED,
            severity=EventSeverity.INFO,
            message="Vault locked"
        )
