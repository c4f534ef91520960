# Vault - Encryption Service
#
# Master password + salt → encryption key (PBKDF2-HMAC-SHA256)
# Password field encryption (AES-256-GCM, random 96-bit nonce per call)
# Master password verification hash (Argon2id, memory-hard)
#
# The Argon2id hash is the only derived value persisted; the PBKDF2 key
# only ever lives in memory. Both are computed from the same salt.

import base64
import binascii
import os

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from argon2.low_level import hash_secret
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..core.config import (
    DEFAULT_ARGON2_MEMORY_COST,
    DEFAULT_ARGON2_PARALLELISM,
    DEFAULT_ARGON2_TIME_COST,
    DEFAULT_PBKDF2_ITERATIONS,
)
from .exceptions import AuthFailure, CryptoFailure, InvalidInput

KEY_LENGTH = 32  # 256 bits for AES-256
SALT_LENGTH = 32  # 256-bit salt
NONCE_LENGTH = 12  # 96-bit nonce for GCM (recommended)
TAG_LENGTH = 16  # GCM authentication tag
HASH_LENGTH = 32  # Argon2id digest length


def encode_for_storage(data: bytes) -> str:
    """Encode binary data for TEXT columns (base64)."""
    return base64.b64encode(data).decode('ascii')


def decode_from_storage(data: str) -> bytes:
    """Decode base64 text written by encode_for_storage().

    Raises:
        ValueError: If the text is not valid base64
    """
    try:
        return base64.b64decode(data.encode('ascii'), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"Invalid base64 data: {e}") from e


def encode_text(text: str) -> bytes:
    """UTF-8 encode caller-supplied text.

    Raises:
        InvalidInput: If the text holds unpaired surrogates
    """
    try:
        return text.encode('utf-8')
    except UnicodeEncodeError as e:
        raise InvalidInput(f"Text is not valid UTF-8: {e.reason}") from e


def generate_salt() -> str:
    """Generate a cryptographically random salt, base64-encoded for storage."""
    return encode_for_storage(os.urandom(SALT_LENGTH))


class SecretKey:
    """
    Mutable holder for symmetric key material.

    The bytes live in a bytearray so they can be overwritten in place;
    ``wipe()`` zeroes them and marks the key unusable. Also a context
    manager that wipes on exit:

        with kdf.derive(password, salt) as key:
            blob = VaultCipher.encrypt(key, "secret")

    Erasure is best-effort: copies handed to the cipher backend are
    outside our control.
    """

    __slots__ = ("_material", "_wiped")

    def __init__(self, material: bytes):
        if len(material) != KEY_LENGTH:
            raise CryptoFailure(f"Key must be {KEY_LENGTH} bytes, got {len(material)}")
        self._material = bytearray(material)
        self._wiped = False

    def __len__(self) -> int:
        return len(self._material)

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else "live"
        return f"SecretKey(<redacted>, {state})"

    def __enter__(self) -> "SecretKey":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    def raw(self) -> bytes:
        """Return the key bytes for handing to the cipher."""
        if self._wiped:
            raise CryptoFailure("Key material has been wiped")
        return bytes(self._material)

    def wipe(self) -> None:
        """Overwrite the key bytes with zeros."""
        for i in range(len(self._material)):
            self._material[i] = 0
        self._wiped = True


class KeyDerivation:
    """
    Derive the 256-bit encryption key from the master password.

    Pure and deterministic: the same password and salt always give the
    same key, so records written in one session decrypt in the next.
    """

    def __init__(self, iterations: int = DEFAULT_PBKDF2_ITERATIONS):
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    def derive(self, password: str, salt: str) -> SecretKey:
        """
        Args:
            password: Master password
            salt: Base64 salt from the master_auth record

        Returns:
            SecretKey holding 256 bits of key material
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=decode_from_storage(salt),
            iterations=self.iterations,
        )
        return SecretKey(kdf.derive(encode_text(password)))


class VaultCipher:
    """
    AES-256-GCM encryption of a single password field.

    Blob layout (base64 text): nonce(12) ‖ ciphertext ‖ tag(16)
    """

    @staticmethod
    def encrypt(key: SecretKey, plaintext: str) -> str:
        """
        Encrypt plaintext under key with a fresh random nonce.

        Raises:
            CryptoFailure: If the key is unusable
            InvalidInput: If plaintext cannot be encoded
        """
        data = encode_text(plaintext)
        nonce = os.urandom(NONCE_LENGTH)
        try:
            ciphertext = AESGCM(key.raw()).encrypt(nonce, data, None)
        except (ValueError, OverflowError) as e:
            raise CryptoFailure(f"Encryption failed: {e}") from e
        return encode_for_storage(nonce + ciphertext)

    @staticmethod
    def decrypt(key: SecretKey, blob: str) -> str:
        """
        Decrypt a blob produced by encrypt().

        Raises:
            AuthFailure: Wrong key, tampered, malformed or truncated blob
        """
        try:
            data = decode_from_storage(blob)
        except ValueError:
            raise AuthFailure("Encrypted password is not valid base64")

        if len(data) < NONCE_LENGTH + TAG_LENGTH:
            raise AuthFailure("Encrypted password is truncated")

        nonce, ciphertext = data[:NONCE_LENGTH], data[NONCE_LENGTH:]
        try:
            plaintext = AESGCM(key.raw()).decrypt(nonce, ciphertext, None)
        except InvalidTag:
            raise AuthFailure("Authentication tag mismatch (wrong key or corrupted data)")

        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as e:
            raise CryptoFailure(f"Decrypted password is not valid UTF-8: {e}") from e


class MasterPasswordHasher:
    """
    Argon2id hash of the master password, stored for verification.

    The hash is computed over the installation salt so the stored record
    and the key derivation share one random value.
    """

    def __init__(
        self,
        time_cost: int = DEFAULT_ARGON2_TIME_COST,
        memory_cost: int = DEFAULT_ARGON2_MEMORY_COST,
        parallelism: int = DEFAULT_ARGON2_PARALLELISM,
    ):
        self.time_cost = time_cost
        self.memory_cost = memory_cost
        self.parallelism = parallelism
        self._verifier = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=HASH_LENGTH,
            salt_len=SALT_LENGTH,
            type=Type.ID,
        )

    def hash(self, password: str, salt: str) -> str:
        """Return the PHC-encoded Argon2id hash ($argon2id$v=19$...)."""
        encoded = hash_secret(
            secret=encode_text(password),
            salt=decode_from_storage(salt),
            time_cost=self.time_cost,
            memory_cost=self.memory_cost,
            parallelism=self.parallelism,
            hash_len=HASH_LENGTH,
            type=Type.ID,
        )
        return encoded.decode('ascii')

    def verify(self, password_hash: str, password: str) -> bool:
        """
        Check password against a stored hash.

        Returns False on mismatch; a malformed stored hash is a crypto
        failure, not a wrong password.
        """
        try:
            return self._verifier.verify(password_hash, encode_text(password))
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as e:
            raise CryptoFailure(f"Stored master password hash is unusable: {e}") from e
