"""
Vault Exception Classes
"""


class VaultError(Exception):
    """Base exception for vault operations"""
    pass


class AlreadySetUp(VaultError):
    """Raised when setup is attempted but a master password already exists"""
    pass


class SetupMissing(VaultError):
    """Raised when authenticate is attempted before any master password exists"""
    pass


class SessionExpired(VaultError):
    """Raised when a privileged operation runs without a valid session"""
    pass


class CryptoFailure(VaultError):
    """Raised when encryption fails or decrypted data cannot be trusted"""
    pass


class AuthFailure(CryptoFailure):
    """Raised when an authentication tag does not verify (wrong key, tampering, truncation)"""
    pass


class NotFound(VaultError):
    """Raised when a referenced record does not exist"""
    pass


class AlreadyExists(VaultError):
    """Raised when the singleton master credential record is created twice"""
    pass


class StorageFailure(VaultError):
    """Raised when the underlying SQLite operation fails"""
    pass


class InvalidInput(VaultError):
    """Raised when caller-supplied text cannot be encoded as UTF-8"""
    pass
