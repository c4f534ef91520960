# Vault Module - Local credential vault
#
# Master password gated session (Argon2id verification, PBKDF2 key)
# Per-field AES-256-GCM encryption of stored passwords
# Inactivity timeout enforced on every privileged operation

from .auth_manager import AuthenticationManager, AuthStatus
from .encryption import KeyDerivation, MasterPasswordHasher, SecretKey, VaultCipher
from .exceptions import (
    AlreadyExists,
    AlreadySetUp,
    AuthFailure,
    CryptoFailure,
    InvalidInput,
    NotFound,
    SessionExpired,
    SetupMissing,
    StorageFailure,
    VaultError,
)
from .master_store import MasterCredential, MasterCredentialStore
from .password_generator import generate_password
from .repository import CredentialRecord, CredentialRepository
from .session import SessionGuard
from .vault_manager import VaultManager

__all__ = [
    "AuthenticationManager",
    "AuthStatus",
    "KeyDerivation",
    "MasterPasswordHasher",
    "SecretKey",
    "VaultCipher",
    "MasterCredential",
    "MasterCredentialStore",
    "CredentialRecord",
    "CredentialRepository",
    "SessionGuard",
    "VaultManager",
    "generate_password",
    # Errors
    "VaultError",
    "AlreadySetUp",
    "SetupMissing",
    "SessionExpired",
    "CryptoFailure",
    "AuthFailure",
    "InvalidInput",
    "NotFound",
    "AlreadyExists",
    "StorageFailure",
]
