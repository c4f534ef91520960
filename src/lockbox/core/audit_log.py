# Core - Audit Logging
#
# Append-only audit trail for every vault lifecycle event: setup, unlock,
# failed unlock, lock, session expiry and credential access.
# Secrets (master password, hash, salt, key, plaintext) are never logged;
# events carry ids, titles and categories only.

import logging
import os
import socket
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog


class EventType(str, Enum):
    """Types of events written to the audit trail."""
    VAULT_CREATED = "vault.created"
    VAULT_UNLOCKED = "vault.unlocked"
    VAULT_UNLOCK_FAILED = "vault.unlock.failed"
    VAULT_LOCKED = "vault.locked"
    VAULT_SESSION_EXPIRED = "vault.session.expired"
    VAULT_PASSWORD_ADDED = "vault.password.added"
    VAULT_PASSWORD_ACCESSED = "vault.password.accessed"
    VAULT_PASSWORD_DELETED = "vault.password.deleted"
    VAULT_ERROR = "vault.error"

    SYSTEM_START = "system.start"
    SYSTEM_STOP = "system.stop"


class EventSeverity(str, Enum):
    """
    Severity levels for audit events.

    - INFO: Normal activity (setup, unlock, access)
    - ALERT: Something the user should know about (failed unlock)
    - CRITICAL: Integrity or storage failure
    """
    INFO = "info"
    ALERT = "alert"
    CRITICAL = "critical"


class AuditLogger:
    """
    Append-only audit logger for vault events.

    Features:
    - Structured JSON logging via structlog
    - Automatic timestamp and event ID
    - OS user / host context capture
    - One log file per day under ``log_dir``
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """
        Initialize audit logger.

        Args:
            log_dir: Directory for audit logs (default: ./audit_logs)
        """
        self.log_dir = Path(log_dir) if log_dir else Path("./audit_logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)

        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        self._setup_file_handler()

        self.logger = structlog.get_logger("lockbox.audit")

    def _setup_file_handler(self):
        """Attach a daily file handler to the ``lockbox.audit`` logger."""
        today = datetime.now().strftime("%Y-%m-%d")
        self.log_file = self.log_dir / f"audit_{today}.log"

        file_handler = logging.FileHandler(self.log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter('%(message)s'))  # structlog renders JSON

        audit_logger = logging.getLogger("lockbox.audit")
        audit_logger.addHandler(file_handler)
        audit_logger.setLevel(logging.INFO)
        self._file_handler = file_handler

    def close(self):
        """Detach and close the file handler."""
        logging.getLogger("lockbox.audit").removeHandler(self._file_handler)
        self._file_handler.close()

    def log_event(
        self,
        event_type: EventType,
        severity: EventSeverity,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log an audit event.

        Args:
            event_type: Type of event (from EventType enum)
            severity: Severity level (from EventSeverity enum)
            message: Human-readable event description
            details: Additional event details (never secrets!)

        Returns:
            str: Event ID (UUID) for reference
        """
        event_id = str(uuid4())

        self.logger.info(
            "audit_event",
            event_id=event_id,
            event_type=event_type.value,
            severity=severity.value,
            message=message,
            timestamp=datetime.utcnow().isoformat(),
            details=details or {},
            user_context=self._get_default_user_context(),
        )

        return event_id

    def log_vault_event(
        self,
        event_type: EventType,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ) -> str:
        """Log an INFO-level vault event, prefixing the message."""
        return self.log_event(
            event_type=event_type,
            severity=EventSeverity.INFO,
            message=f"Vault: {message}",
            details=details
        )

    def _get_default_user_context(self) -> Dict[str, Any]:
        return {
            "os_user": os.getenv("USERNAME") or os.getenv("USER"),
            "hostname": socket.gethostname(),
            "platform": sys.platform,
        }


# Global logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Get global audit logger (singleton pattern)."""
    global _audit_logger
    if _audit_logger is None:
        from .config import get_settings
        _audit_logger = AuditLogger(log_dir=get_settings().audit_log_dir)
    return _audit_logger


def log_security_event(
    event_type: EventType,
    severity: EventSeverity,
    message: str,
    **kwargs
) -> str:
    """
    Convenience function for logging audit events.

    Usage:
        log_security_event(
            EventType.VAULT_ERROR,
            EventSeverity.CRITICAL,
            "Stored credential failed integrity check",
            details={"password_id": 7}
        )
    """
    return get_audit_logger().log_event(event_type, severity, message, **kwargs)
