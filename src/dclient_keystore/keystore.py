"""Keystore operations exposed to the command layer."""

from pathlib import Path
from typing import Callable, Optional

from .audit import EventType, audit_event
from .config import KeystoreSettings
from .crypto import generate
from .storage import CredentialRecord, FileCredentialStore, KeystoreError
from .storage.permissions import get_permission_enforcer

AUDIT_USER = "cli"


class CommandNotImplementedError(KeystoreError):
    """Exception raised for commands that have no implementation yet."""


class Keystore:
    """Generates, stores, imports and lists named keypairs."""

    def __init__(
        self,
        store: FileCredentialStore,
        generator: Callable[[str], CredentialRecord] = generate,
    ):
        self.store = store
        self.generator = generator

    @classmethod
    def from_settings(cls, settings: Optional[KeystoreSettings] = None) -> "Keystore":
        """Build a keystore rooted at the configured data directory."""
        settings = settings or KeystoreSettings()
        store = FileCredentialStore(
            settings.resolve_data_dir(), get_permission_enforcer()
        )
        return cls(store)

    def credential_path(self, name: str) -> Path:
        return self.store.resolve_credential_path(name)

    def generate_and_save(self, name: str) -> Path:
        """Generate a keypair and save it under its canonical path.

        Args:
            name: Name of the new credential.

        Returns:
            The path written.

        Raises:
            EntropyError: If no secure randomness is available.
            CredentialIOError: If the file cannot be written.
            PermissionEnforcementError: If the file cannot be made owner-only.
            ValueError: If the name is not a valid credential name.
        """
        try:
            path = self.store.resolve_credential_path(name)
            record = self.generator(name)
            self.store.save(record, path)
        except (KeystoreError, ValueError) as e:
            audit_event(
                EventType.KEY_CREATE, AUDIT_USER, False, {"name": name}, error=e
            )
            raise

        audit_event(
            EventType.KEY_CREATE, AUDIT_USER, True, {"name": name, "path": str(path)}
        )
        return path

    def import_and_normalize(self, source_path: Path) -> CredentialRecord:
        """Load a credential from any path and copy it into the store.

        Args:
            source_path: File to import.

        Returns:
            The imported record, now also stored at its canonical path.

        Raises:
            CredentialIOError: If reading or re-saving fails.
            DeserializationError: If the file is not a valid credential.
        """
        try:
            record = self.store.load(source_path)
        except KeystoreError as e:
            audit_event(
                EventType.KEY_IMPORT,
                AUDIT_USER,
                False,
                {"source": str(source_path)},
                error=e,
            )
            raise

        audit_event(
            EventType.KEY_IMPORT,
            AUDIT_USER,
            True,
            {
                "name": record.name,
                "source": str(source_path),
                "path": str(self.store.resolve_credential_path(record.name)),
            },
        )
        return record

    def read_stored(self, name: str) -> CredentialRecord:
        """Load a stored credential by name."""
        path = self.store.resolve_credential_path(name)
        try:
            record = self.store.load(path)
        except KeystoreError as e:
            audit_event(EventType.KEY_READ, AUDIT_USER, False, {"name": name}, error=e)
            raise

        audit_event(EventType.KEY_READ, AUDIT_USER, True, {"name": name})
        return record

    def list_stored_names(self) -> list[str]:
        """List stored credential names.

        Raises:
            CredentialIOError: If the store has never been initialized.
        """
        try:
            names = self.store.list_names()
        except KeystoreError as e:
            audit_event(EventType.KEY_LIST, AUDIT_USER, False, error=e)
            raise

        audit_event(EventType.KEY_LIST, AUDIT_USER, True, {"count": len(names)})
        return names

    def unimplemented(self, command: str) -> None:
        """Reject a command that exists only for interface compatibility.

        Raises:
            CommandNotImplementedError: Always.
        """
        error = CommandNotImplementedError(f"'{command}' is not yet implemented")
        audit_event(
            EventType.COMMAND_UNIMPLEMENTED,
            AUDIT_USER,
            False,
            {"command": command},
            error=error,
        )
        raise error
