"""Shared fixtures for keystore tests."""

from pathlib import Path

import pytest

from dclient_keystore.audit import reset_logger
from dclient_keystore.crypto import generate
from dclient_keystore.keystore import Keystore
from dclient_keystore.storage import CredentialRecord, FileCredentialStore


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep tests away from the real data directory and logging setup."""
    for var in (
        "DCLIENT_PROGRAM_IDENTITY",
        "DCLIENT_LOG_LEVEL",
        "DCLIENT_LOG_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("DCLIENT_DATA_DIR", str(tmp_path / "env-data"))
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Data directory of a fresh store. Not created on disk."""
    return tmp_path / "data"


@pytest.fixture
def store(data_dir: Path) -> FileCredentialStore:
    """Create a store rooted at a temporary directory."""
    return FileCredentialStore(data_dir)


@pytest.fixture
def keystore(store: FileCredentialStore) -> Keystore:
    """Create a keystore backed by the temporary store."""
    return Keystore(store)


@pytest.fixture
def record() -> CredentialRecord:
    """Create a record holding a fresh keypair."""
    return generate("alice")
