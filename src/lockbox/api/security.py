# API Security - Per-process token for the local API
#
# A random token is generated when the server starts and handed to the
# desktop shell; every vault endpoint requires it in X-Session-Token.
# This keeps other local processes from driving the vault API.
#
# Not to be confused with the vault session (master password + timeout),
# which lives in lockbox.vault.session.

import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

_API_TOKEN: Optional[str] = None


def initialize_api_token() -> str:
    """
    Generate a new 256-bit API token for this server instance.

    Returns:
        The token (printed once for the frontend to pick up)
    """
    global _API_TOKEN
    _API_TOKEN = secrets.token_urlsafe(32)
    return _API_TOKEN


def set_api_token(token: Optional[str]) -> None:
    """Replace the token (for testing)."""
    global _API_TOKEN
    _API_TOKEN = token


async def verify_api_token(x_session_token: Optional[str] = Header(None)) -> str:
    """
    FastAPI dependency rejecting requests without the API token.

    Raises:
        HTTPException: 503 before startup, 401 if missing or wrong
    """
    if _API_TOKEN is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="API token not initialized"
        )

    if x_session_token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Session-Token header"
        )

    # Constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_session_token, _API_TOKEN):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token"
        )

    return x_session_token
