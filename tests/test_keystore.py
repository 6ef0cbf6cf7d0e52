"""Tests for the keystore operations used by the command layer."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from dclient_keystore.audit import EventType
from dclient_keystore.config import KeystoreSettings
from dclient_keystore.crypto import EntropyError, generate
from dclient_keystore.keystore import CommandNotImplementedError, Keystore
from dclient_keystore.storage import (
    CredentialIOError,
    CredentialRecord,
    DeserializationError,
)


def test_generate_and_save(keystore: Keystore, data_dir: Path):
    """Test a new keypair is written to its canonical path."""
    path = keystore.generate_and_save("bob")

    assert path == data_dir / "keypairs" / "bob.json"
    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["name"] == "bob"
    assert len(document["keypair"]) == 64


def test_generate_and_save_twice_replaces_key(keystore: Keystore):
    """Test generating an existing name stores a new keypair."""
    path = keystore.generate_and_save("bob")
    first = path.read_text(encoding="utf-8")
    keystore.generate_and_save("bob")

    assert path.read_text(encoding="utf-8") != first
    assert keystore.list_stored_names() == ["bob"]


def test_generate_and_save_entropy_failure(keystore: Keystore):
    """Test an entropy failure aborts without writing anything."""
    with patch("dclient_keystore.crypto.keys.os.urandom", side_effect=OSError("gone")):
        with pytest.raises(EntropyError):
            keystore.generate_and_save("bob")

    assert not keystore.credential_path("bob").exists()


def test_generate_and_save_invalid_name(keystore: Keystore):
    """Test invalid names are rejected before generating a key."""
    with pytest.raises(ValueError):
        keystore.generate_and_save("../bob")


def test_import_and_normalize(keystore: Keystore, tmp_path: Path):
    """Test importing copies the record to the canonical path of its name."""
    record = generate("alice")
    source = tmp_path / "somewhere" / "else" / "key.json"
    source.parent.mkdir(parents=True)
    source.write_text(json.dumps(record.to_document()), encoding="utf-8")

    imported = keystore.import_and_normalize(source)

    assert imported == record
    canonical = keystore.credential_path("alice")
    stored = CredentialRecord.model_validate(
        json.loads(canonical.read_text(encoding="utf-8"))
    )
    assert stored == record
    assert keystore.list_stored_names() == ["alice"]


def test_import_canonical_path_is_stable(keystore: Keystore):
    """Test re-importing a stored credential rewrites it unchanged."""
    path = keystore.generate_and_save("bob")
    before = path.read_text(encoding="utf-8")

    record = keystore.import_and_normalize(path)

    assert record.name == "bob"
    assert path.read_text(encoding="utf-8") == before
    assert keystore.list_stored_names() == ["bob"]


def test_import_invalid_file(keystore: Keystore, tmp_path: Path):
    """Test importing a corrupt file raises DeserializationError."""
    source = tmp_path / "bad.json"
    source.write_text(json.dumps({"name": "bob", "keypair": [0] * 10}))

    with pytest.raises(DeserializationError):
        keystore.import_and_normalize(source)


def test_read_stored(keystore: Keystore):
    """Test a stored credential can be read back by name."""
    keystore.generate_and_save("bob")
    assert keystore.read_stored("bob").name == "bob"


def test_read_stored_missing(keystore: Keystore):
    """Test reading an unknown name raises CredentialIOError."""
    with pytest.raises(CredentialIOError):
        keystore.read_stored("nobody")


def test_list_stored_names(keystore: Keystore):
    """Test listing after saving two credentials."""
    keystore.generate_and_save("a")
    keystore.generate_and_save("b")
    assert sorted(keystore.list_stored_names()) == ["a", "b"]


def test_list_stored_names_uninitialized(keystore: Keystore):
    """Test an uninitialized store is an error, not an empty list."""
    with pytest.raises(CredentialIOError):
        keystore.list_stored_names()


@pytest.mark.parametrize("command", ["pack", "unpack", "schema"])
def test_unimplemented(keystore: Keystore, command: str):
    """Test bundle commands fail explicitly."""
    with pytest.raises(CommandNotImplementedError, match="not yet implemented"):
        keystore.unimplemented(command)


def test_from_settings(tmp_path: Path):
    """Test the keystore is rooted at the configured data directory."""
    settings = KeystoreSettings(data_dir=tmp_path / "configured")
    keystore = Keystore.from_settings(settings)

    path = keystore.generate_and_save("bob")
    assert path == tmp_path / "configured" / "keypairs" / "bob.json"


class TestAuditTrail:
    """Tests for audit events emitted by keystore operations."""

    @pytest.fixture
    def mock_audit(self):
        with patch("dclient_keystore.keystore.audit_event") as mock:
            yield mock

    def test_create_success(self, keystore: Keystore, mock_audit):
        """Test a successful create is audited."""
        path = keystore.generate_and_save("bob")

        mock_audit.assert_called_once_with(
            EventType.KEY_CREATE, "cli", True, {"name": "bob", "path": str(path)}
        )

    def test_create_failure(self, keystore: Keystore, mock_audit):
        """Test a failed create is audited with the error."""
        with pytest.raises(ValueError):
            keystore.generate_and_save("")

        args, kwargs = mock_audit.call_args
        assert args[:3] == (EventType.KEY_CREATE, "cli", False)
        assert isinstance(kwargs["error"], ValueError)

    def test_import_failure(self, keystore: Keystore, tmp_path: Path, mock_audit):
        """Test a failed import is audited with the source path."""
        source = tmp_path / "missing.json"
        with pytest.raises(CredentialIOError):
            keystore.import_and_normalize(source)

        args, kwargs = mock_audit.call_args
        assert args == (EventType.KEY_IMPORT, "cli", False, {"source": str(source)})
        assert isinstance(kwargs["error"], CredentialIOError)

    def test_list(self, keystore: Keystore, mock_audit):
        """Test listing is audited with the count only."""
        keystore.store.resolve_credentials_dir().mkdir(parents=True)
        keystore.list_stored_names()

        mock_audit.assert_called_once_with(EventType.KEY_LIST, "cli", True, {"count": 0})

    def test_unimplemented(self, keystore: Keystore, mock_audit):
        """Test unimplemented commands are audited as failures."""
        with pytest.raises(CommandNotImplementedError):
            keystore.unimplemented("pack")

        args, _ = mock_audit.call_args
        assert args == (EventType.COMMAND_UNIMPLEMENTED, "cli", False, {"command": "pack"})
