# Lockbox - Local credential vault
#
# Master-password gated, time-bounded sessions over an encrypted
# SQLite store of title/username/password/category/notes records.

__version__ = "0.1.0"
__author__ = "Lockbox Team"
__description__ = "Local single-user credential vault"

from .core import (
    EventSeverity,
    EventType,
    VaultSettings,
    get_audit_logger,
    get_settings,
)

__all__ = [
    "__version__",
    "EventType",
    "EventSeverity",
    "VaultSettings",
    "get_audit_logger",
    "get_settings",
]
