"""Tests for the SessionGuard state machine.

Covers:
  - Initial Unauthenticated state
  - install / touch / clear transitions
  - Strict timeout boundary (elapsed >= timeout expires)
  - is_valid() is read-only
  - access() refreshes the clock, wipes stale keys, lends the live key
"""

import os
import threading

import pytest

from lockbox.vault.encryption import KEY_LENGTH, SecretKey
from lockbox.vault.exceptions import SessionExpired
from lockbox.vault.session import SessionGuard

TIMEOUT = 900


@pytest.fixture
def guard(clock):
    return SessionGuard(timeout=TIMEOUT, clock=clock)


def _key():
    return SecretKey(os.urandom(KEY_LENGTH))


class TestInitialState:
    def test_starts_unauthenticated(self, guard):
        assert not guard.is_authenticated
        assert not guard.is_valid()
        assert guard.last_activity is None

    def test_access_refused(self, guard):
        with pytest.raises(SessionExpired):
            with guard.access():
                pass

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            SessionGuard(timeout=0)


class TestTransitions:
    def test_install_authenticates(self, guard, clock):
        guard.install(_key())
        assert guard.is_authenticated
        assert guard.is_valid()
        assert guard.last_activity == clock.now

    def test_install_replaces_and_wipes_previous(self, guard):
        first, second = _key(), _key()
        guard.install(first)
        guard.install(second)
        assert first.is_wiped
        assert not second.is_wiped
        with guard.access() as live:
            assert live is second

    def test_clear_wipes_and_resets(self, guard):
        key = _key()
        guard.install(key)
        guard.clear()
        assert key.is_wiped
        assert not guard.is_authenticated
        assert guard.last_activity is None
        with pytest.raises(SessionExpired):
            with guard.access():
                pass

    def test_clear_when_unauthenticated_is_noop(self, guard):
        guard.clear()
        assert not guard.is_authenticated

    def test_touch_refreshes(self, guard, clock):
        guard.install(_key())
        clock.advance(600)
        guard.touch()
        clock.advance(600)
        assert guard.is_valid()


class TestTimeout:
    def test_valid_just_before_timeout(self, guard, clock):
        guard.install(_key())
        clock.advance(TIMEOUT - 0.001)
        assert guard.is_valid()

    def test_invalid_at_exact_timeout(self, guard, clock):
        guard.install(_key())
        clock.advance(TIMEOUT)
        assert not guard.is_valid()

    def test_is_valid_does_not_refresh_or_expire(self, guard, clock):
        key = _key()
        guard.install(key)
        installed_at = guard.last_activity
        clock.advance(10)
        guard.is_valid()
        assert guard.last_activity == installed_at

        clock.advance(TIMEOUT)
        assert not guard.is_valid()
        # Still holding the (stale) key until a privileged call hits it
        assert guard.is_authenticated
        assert not key.is_wiped

    def test_access_on_stale_session_wipes_key(self, guard, clock):
        key = _key()
        guard.install(key)
        clock.advance(TIMEOUT)
        with pytest.raises(SessionExpired, match="expired"):
            with guard.access():
                pass
        assert key.is_wiped
        assert not guard.is_authenticated

    def test_access_refreshes_clock(self, guard, clock):
        guard.install(_key())
        clock.advance(TIMEOUT - 1)
        with guard.access():
            pass
        assert guard.last_activity == clock.now
        clock.advance(TIMEOUT - 1)
        with guard.access():
            pass

    def test_expired_after_valid_call(self, guard, clock):
        guard.install(_key())
        with guard.access():
            pass
        clock.advance(TIMEOUT)
        with pytest.raises(SessionExpired):
            with guard.access():
                pass


class TestConcurrency:
    def test_clear_waits_for_access_block(self, guard):
        key = _key()
        guard.install(key)
        entered = threading.Event()
        release = threading.Event()
        observed = []

        def reader():
            with guard.access() as live:
                entered.set()
                release.wait(timeout=5)
                observed.append(live.is_wiped)

        t = threading.Thread(target=reader)
        t.start()
        assert entered.wait(timeout=5)

        clearer = threading.Thread(target=guard.clear)
        clearer.start()
        release.set()
        t.join(timeout=5)
        clearer.join(timeout=5)

        assert observed == [False]
        assert key.is_wiped
