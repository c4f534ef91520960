# Vault API - HTTP endpoints over the vault command surface
#
# - Status / setup / authenticate / logout
# - CRUD for stored passwords (session-gated in the vault core)
# - Password generation
#
# Endpoints are plain `def` so FastAPI runs them in its thread pool; the
# vault serialises concurrent callers with its own locks.

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from ..commands import CommandResult, VaultCommands
from ..core.config import get_settings
from ..vault import VaultManager
from .security import verify_api_token

router = APIRouter(prefix="/api/vault", tags=["vault"])

# Minimum master password length enforced at the API boundary
MIN_MASTER_PASSWORD_LENGTH = 8

_ERROR_STATUS: Dict[str, int] = {
    "AlreadySetUp": status.HTTP_409_CONFLICT,
    "SetupMissing": status.HTTP_412_PRECONDITION_FAILED,
    "SessionExpired": status.HTTP_401_UNAUTHORIZED,
    "NotFound": status.HTTP_404_NOT_FOUND,
    "AuthFailure": 422,
    "CryptoFailure": 422,
    "InvalidInput": status.HTTP_400_BAD_REQUEST,
    "InvalidLength": status.HTTP_400_BAD_REQUEST,
}


# ── Singleton ────────────────────────────────────────────────────────

_commands: Optional[VaultCommands] = None


def get_vault_commands() -> VaultCommands:
    """Get or create the command facade over the configured vault."""
    global _commands
    if _commands is None:
        _commands = VaultCommands(VaultManager(settings=get_settings()))
    return _commands


def set_vault_commands(commands: Optional[VaultCommands]) -> None:
    """Replace the singleton (for testing)."""
    global _commands
    _commands = commands


def _unwrap(result: CommandResult):
    if result.ok:
        return result.value
    raise HTTPException(
        status_code=_ERROR_STATUS.get(result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"error": result.error, "error_code": result.error_code},
    )


# Request Models
class SetupRequest(BaseModel):
    master_password: str = Field(..., min_length=MIN_MASTER_PASSWORD_LENGTH)


class AuthenticateRequest(BaseModel):
    master_password: str = Field(..., min_length=1)


class AddPasswordRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    category: Optional[str] = None
    notes: Optional[str] = None


# Endpoints

@router.get("/status")
def check_auth_status(token: str = Depends(verify_api_token)):
    """Whether a master password exists and whether a session is live."""
    return _unwrap(get_vault_commands().check_auth_status())


@router.post("/setup")
def setup_master_password(request: SetupRequest, token: str = Depends(verify_api_token)):
    """
    Create the master password and open a session.

    409 if a master password already exists.
    """
    _unwrap(get_vault_commands().setup_master_password(request.master_password))
    return {"success": True, "message": "Master password set up successfully"}


@router.post("/authenticate")
def authenticate(request: AuthenticateRequest, token: str = Depends(verify_api_token)):
    """
    Unlock the vault.

    A wrong password is not an HTTP error: the response says
    ``{"authenticated": false}``.
    """
    authenticated = _unwrap(get_vault_commands().authenticate(request.master_password))
    return {"authenticated": authenticated}


@router.post("/logout")
def logout(token: str = Depends(verify_api_token)):
    _unwrap(get_vault_commands().logout())
    return {"success": True, "message": "Vault locked"}


@router.get("/passwords")
def get_passwords(token: str = Depends(verify_api_token)):
    """List stored credentials without decrypting them."""
    return {"passwords": _unwrap(get_vault_commands().get_passwords())}


@router.post("/passwords")
def add_password(request: AddPasswordRequest, token: str = Depends(verify_api_token)):
    password_id = _unwrap(get_vault_commands().add_password(
        title=request.title,
        username=request.username,
        password=request.password,
        category=request.category or None,
        notes=request.notes or None,
    ))
    return {"success": True, "password_id": password_id}


@router.get("/passwords/{password_id}/decrypt")
def decrypt_password(password_id: int, token: str = Depends(verify_api_token)):
    return {"password": _unwrap(get_vault_commands().decrypt_password(password_id))}


@router.delete("/passwords/{password_id}")
def delete_password(password_id: int, token: str = Depends(verify_api_token)):
    """Idempotent: deleting an unknown id still succeeds."""
    _unwrap(get_vault_commands().delete_password(password_id))
    return {"success": True}


@router.get("/generate-password")
def generate_password(
    length: int = Query(16),
    token: str = Depends(verify_api_token),
):
    return {"password": _unwrap(get_vault_commands().generate_password(length))}
