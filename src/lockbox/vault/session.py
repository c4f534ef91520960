# Vault - Session Guard
#
# Holds the live encryption key (or none) and the last-activity clock.
# Every privileged vault operation enters through access(), which either
# refreshes the clock and lends out the key, or expires the stale session
# and refuses.
#
# States: Unauthenticated (no key, clock unset) <-> Authenticated.

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from ..core.audit_log import EventType, get_audit_logger
from ..core.config import DEFAULT_SESSION_TIMEOUT_SECONDS
from .encryption import SecretKey
from .exceptions import SessionExpired

logger = logging.getLogger(__name__)


class SessionGuard:
    """
    Inactivity-bounded holder of the session key.

    Args:
        timeout: Seconds of inactivity after which the session expires
        clock: Monotonic time source in seconds (injectable for tests)

    All state changes happen under an internal RLock. access() keeps the
    lock for the whole privileged operation, so the key cannot be cleared
    while a caller is using it.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_SESSION_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self._clock = clock
        self._lock = threading.RLock()
        self._key: Optional[SecretKey] = None
        self._last_activity: Optional[float] = None

    @property
    def is_authenticated(self) -> bool:
        """True while a key is installed (regardless of staleness)."""
        with self._lock:
            return self._key is not None

    @property
    def last_activity(self) -> Optional[float]:
        with self._lock:
            return self._last_activity

    def _is_fresh(self) -> bool:
        return (
            self._key is not None
            and self._last_activity is not None
            and (self._clock() - self._last_activity) < self.timeout
        )

    def _discard_key(self) -> None:
        if self._key is not None:
            self._key.wipe()
        self._key = None
        self._last_activity = None

    def is_valid(self) -> bool:
        """
        Authenticated and inside the timeout window.

        Read-only: neither refreshes the clock nor expires the session.
        """
        with self._lock:
            return self._is_fresh()

    def touch(self) -> None:
        """Set last activity to now."""
        with self._lock:
            self._last_activity = self._clock()

    def install(self, key: SecretKey) -> None:
        """Enter the Authenticated state with key, wiping any previous key."""
        with self._lock:
            if self._key is not None and self._key is not key:
                self._key.wipe()
            self._key = key
            self._last_activity = self._clock()

    def clear(self) -> None:
        """Wipe and drop the key; the clock goes back to "never"."""
        with self._lock:
            self._discard_key()

    @contextmanager
    def access(self) -> Iterator[SecretKey]:
        """
        Gate a privileged operation.

        Yields:
            The live SecretKey (do not keep a reference past the block)

        Raises:
            SessionExpired: No key installed, or the session went stale.
                A stale key is wiped before raising.
        """
        with self._lock:
            if self._key is None:
                raise SessionExpired("Not authenticated. Please log in.")

            if not self._is_fresh():
                idle = self._clock() - (self._last_activity or 0.0)
                self._discard_key()
                logger.info("Session expired after %.0fs of inactivity", idle)
                get_audit_logger().log_vault_event(
                    event_type=EventType.VAULT_SESSION_EXPIRED,
                    message="Session expired due to inactivity",
                    details={"timeout_seconds": self.timeout},
                )
                raise SessionExpired("Session expired. Please log in again.")

            self._last_activity = self._clock()
            yield self._key
