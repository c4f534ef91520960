# Vault - Password Generator
#
# Random passwords for new credentials, drawn with the secrets module.
# Every generated password contains at least one character from each class
# (upper, lower, digit, symbol).

import secrets
import string

SYMBOLS = "!@#$%^&*"
DEFAULT_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + SYMBOLS
DEFAULT_LENGTH = 16
MIN_LENGTH = 4
MAX_LENGTH = 128

_CLASSES = (string.ascii_uppercase, string.ascii_lowercase, string.digits, SYMBOLS)


def generate_password(length: int = DEFAULT_LENGTH) -> str:
    """
    Generate a random password.

    Args:
        length: Number of characters (MIN_LENGTH..MAX_LENGTH)

    Raises:
        ValueError: If length is out of range
    """
    if not MIN_LENGTH <= length <= MAX_LENGTH:
        raise ValueError(f"Password length must be between {MIN_LENGTH} and {MAX_LENGTH}")

    chars = [secrets.choice(charset) for charset in _CLASSES]
    chars += [secrets.choice(DEFAULT_ALPHABET) for _ in range(length - len(chars))]

    # Guaranteed characters must not always lead
    secrets.SystemRandom().shuffle(chars)

    return "".join(chars)
