# Command Surface
#
# The operations exposed to a dispatch layer (HTTP routes, desktop shell,
# CLI). Every command returns a CommandResult; vault errors come back as
# text plus a machine-readable code instead of propagating.

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .vault import VaultError, VaultManager, generate_password

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """
    Outcome of a command.

    Attributes:
        ok: True if the command succeeded
        value: Success value (None for commands with nothing to return)
        error: Human-readable error text when ok is False
        error_code: Error class name (e.g. "SessionExpired") when ok is False
    """
    ok: bool
    value: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "CommandResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc: VaultError) -> "CommandResult":
        return cls(ok=False, error=str(exc), error_code=type(exc).__name__)

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "value": self.value}
        return {"ok": False, "error": self.error, "error_code": self.error_code}


class VaultCommands:
    """
    Command facade over a VaultManager.

    Usage:
        commands = VaultCommands(VaultManager("data/passwords.db"))
        commands.setup_master_password("Correct Horse")
        result = commands.add_password("Email", "me@x.com", "p@ss")
        if not result.ok:
            print(result.error)
    """

    def __init__(self, vault: VaultManager):
        self.vault = vault

    def _run(self, name: str, operation: Callable[[], Any]) -> CommandResult:
        try:
            return CommandResult.success(operation())
        except VaultError as e:
            logger.info("Command %s failed: %s", name, type(e).__name__)
            return CommandResult.failure(e)

    def check_auth_status(self) -> CommandResult:
        """value: {"needs_setup": bool, "is_authenticated": bool}"""
        return self._run("check_auth_status", lambda: self.vault.auth.check_status().to_dict())

    def setup_master_password(self, master_password: str) -> CommandResult:
        return self._run("setup_master_password", lambda: self.vault.auth.setup(master_password))

    def authenticate(self, master_password: str) -> CommandResult:
        """value: True, or False for a wrong password."""
        return self._run("authenticate", lambda: self.vault.auth.authenticate(master_password))

    def logout(self) -> CommandResult:
        return self._run("logout", self.vault.auth.logout)

    def get_passwords(self) -> CommandResult:
        """value: list of record dicts, passwords still encrypted."""
        return self._run(
            "get_passwords",
            lambda: [record.to_dict() for record in self.vault.credentials.list()],
        )

    def add_password(
        self,
        title: str,
        username: str,
        password: str,
        category: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> CommandResult:
        """value: the new record id."""
        return self._run(
            "add_password",
            lambda: self.vault.credentials.add(title, username, password, category, notes),
        )

    def decrypt_password(self, password_id: int) -> CommandResult:
        """value: the plaintext password."""
        return self._run("decrypt_password", lambda: self.vault.credentials.decrypt(password_id))

    def delete_password(self, password_id: int) -> CommandResult:
        return self._run("delete_password", lambda: self.vault.credentials.delete(password_id))

    def generate_password(self, length: int = 16) -> CommandResult:
        """Not session-gated; the generated value is never stored."""
        try:
            return CommandResult.success(generate_password(length))
        except ValueError as e:
            return CommandResult(ok=False, error=str(e), error_code="InvalidLength")
