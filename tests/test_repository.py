"""Tests for CredentialRepository (passwords table, session-gated)."""

import base64

import pytest

from lockbox.vault.encryption import encode_for_storage
from lockbox.vault.exceptions import AuthFailure, NotFound, SessionExpired, StorageFailure


@pytest.fixture
def unlocked(vault):
    vault.auth.setup("Correct Horse")
    return vault


class TestSessionGate:
    @pytest.mark.parametrize("call", [
        lambda repo: repo.list(),
        lambda repo: repo.add("t", "u", "p"),
        lambda repo: repo.decrypt(1),
        lambda repo: repo.delete(1),
    ])
    def test_every_operation_requires_session(self, vault, call):
        with pytest.raises(SessionExpired):
            call(vault.credentials)

    def test_operations_refresh_clock(self, unlocked, clock):
        timeout = unlocked.guard.timeout
        for _ in range(3):
            clock.advance(timeout - 1)
            unlocked.credentials.list()
        assert unlocked.guard.is_valid()

    def test_call_at_timeout_refused(self, unlocked, clock):
        unlocked.credentials.list()
        clock.advance(unlocked.guard.timeout)
        with pytest.raises(SessionExpired):
            unlocked.credentials.list()
        # The stale key was discarded, a fresh call still fails
        with pytest.raises(SessionExpired):
            unlocked.credentials.list()


class TestAddAndList:
    def test_add_returns_id(self, unlocked):
        first = unlocked.credentials.add("Email", "me@x.com", "p@ss")
        second = unlocked.credentials.add("Bank", "me", "hunter2")
        assert isinstance(first, int)
        assert second != first

    def test_list_returns_encrypted(self, unlocked):
        password_id = unlocked.credentials.add(
            "Email", "me@x.com", "p@ss", category="mail", notes="personal"
        )
        records = unlocked.credentials.list()
        assert len(records) == 1
        record = records[0]
        assert record.id == password_id
        assert record.title == "Email"
        assert record.username == "me@x.com"
        assert record.category == "mail"
        assert record.notes == "personal"
        assert record.last_accessed is None
        assert record.encrypted_password
        assert record.encrypted_password != "p@ss"
        assert len(base64.b64decode(record.encrypted_password)) == 12 + len("p@ss") + 16

    def test_optional_fields_default_none(self, unlocked):
        unlocked.credentials.add("Email", "me@x.com", "p@ss")
        record = unlocked.credentials.list()[0]
        assert record.category is None
        assert record.notes is None

    def test_list_ordered_by_id(self, unlocked):
        ids = [unlocked.credentials.add(f"t{i}", "u", "p") for i in range(3)]
        assert [r.id for r in unlocked.credentials.list()] == ids

    def test_to_dict(self, unlocked):
        unlocked.credentials.add("Email", "me@x.com", "p@ss")
        data = unlocked.credentials.list()[0].to_dict()
        assert set(data) == {
            "id", "title", "username", "encrypted_password",
            "category", "notes", "last_accessed",
        }


class TestDecrypt:
    def test_decrypt_roundtrip(self, unlocked):
        password_id = unlocked.credentials.add("Email", "me@x.com", "p@ss")
        assert unlocked.credentials.decrypt(password_id) == "p@ss"

    def test_decrypt_unknown_id(self, unlocked):
        with pytest.raises(NotFound):
            unlocked.credentials.decrypt(999)

    def test_decrypt_tampered_record(self, unlocked):
        password_id = unlocked.credentials.add("Email", "me@x.com", "p@ss")
        blob = unlocked.credentials.list()[0].encrypted_password
        raw = bytearray(base64.b64decode(blob))
        raw[-1] ^= 0x01
        unlocked.conn.execute(
            "UPDATE passwords SET encrypted_password = ? WHERE id = ?",
            (encode_for_storage(bytes(raw)), password_id),
        )
        with pytest.raises(AuthFailure):
            unlocked.credentials.decrypt(password_id)

    def test_decrypt_record_from_other_key(self, unlocked, fast_settings, tmp_path, clock):
        from lockbox.vault import VaultManager

        with VaultManager(tmp_path / "other.db", settings=fast_settings, clock=clock) as other:
            other.auth.setup("Correct Horse")  # same password, different salt
            foreign_id = other.credentials.add("Email", "me@x.com", "p@ss")
            foreign_blob = other.credentials.list()[0].encrypted_password

        cursor = unlocked.conn.execute(
            "INSERT INTO passwords (title, username, encrypted_password) VALUES (?, ?, ?)",
            ("Foreign", "me", foreign_blob),
        )
        with pytest.raises(AuthFailure):
            unlocked.credentials.decrypt(cursor.lastrowid)
        assert foreign_id


class TestDelete:
    def test_delete(self, unlocked):
        password_id = unlocked.credentials.add("Email", "me@x.com", "p@ss")
        unlocked.credentials.delete(password_id)
        assert unlocked.credentials.list() == []
        with pytest.raises(NotFound):
            unlocked.credentials.decrypt(password_id)

    def test_delete_unknown_is_noop(self, unlocked):
        unlocked.credentials.add("Email", "me@x.com", "p@ss")
        unlocked.credentials.delete(12345)
        unlocked.credentials.delete(12345)
        assert len(unlocked.credentials.list()) == 1


class TestStorageFailure:
    def test_closed_vault(self, unlocked):
        unlocked.conn.close()
        with pytest.raises(StorageFailure):
            unlocked.credentials.list()
