"""File-backed credential store.

Each credential lives in its own JSON file under ``<data_dir>/keypairs``.
Writes go to a temporary file in the target directory which is renamed over
the destination, so a reader never observes a partially written record.
There is no locking between processes: the last writer wins.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
import structlog

from .base import (
    CredentialIOError,
    CredentialRecord,
    DeserializationError,
    PermissionEnforcementError,
    PermissionEnforcer,
)
from .paths import CREDENTIAL_SUFFIX, credential_path, credentials_dir
from .permissions import get_permission_enforcer

logger = structlog.get_logger(__name__)


class FileCredentialStore:
    """Credential store rooted at a program data directory."""

    def __init__(
        self, data_dir: Path, enforcer: Optional[PermissionEnforcer] = None
    ):
        """Initialize the store.

        Args:
            data_dir: Root data directory of the program. Nothing is created
                until the first save.
            enforcer: Permission enforcer. If None, uses the platform default.
        """
        self.data_dir = Path(data_dir)
        self.enforcer = enforcer or get_permission_enforcer()

    def resolve_credential_path(self, name: str) -> Path:
        """Get the canonical file of a credential. Does not touch the disk."""
        return credential_path(self.data_dir, name)

    def resolve_credentials_dir(self) -> Path:
        """Get the directory holding all credential files."""
        return credentials_dir(self.data_dir)

    def save(self, record: CredentialRecord, path: Path) -> None:
        """Persist a credential record.

        Args:
            record: The record to write.
            path: Destination file. Parent directories are created as needed.

        Raises:
            CredentialIOError: If the directory or file cannot be written.
            PermissionEnforcementError: If the file cannot be made owner-only.
                Nothing is written to ``path`` in that case.
        """
        path = Path(path)
        try:
            path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            raise CredentialIOError(
                f"Failed to create credential directory {path.parent}: {e}"
            ) from e

        data = json.dumps(record.to_document(), indent=2)

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise CredentialIOError(f"Failed to create {path}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())

            self.enforcer.enforce(tmp_path)
            os.replace(tmp_path, path)
        except PermissionEnforcementError:
            tmp_path.unlink(missing_ok=True)
            raise
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise CredentialIOError(f"Failed to write {path}: {e}") from e

        logger.debug("credential_saved", name=record.name, path=str(path))

    def load(self, path: Path) -> CredentialRecord:
        """Load a credential record and re-home it into the store.

        The record is re-saved to its canonical path, which may differ from
        ``path``. Importing a file from anywhere therefore makes it available
        under its name afterwards.

        Args:
            path: File to read.

        Returns:
            The loaded record.

        Raises:
            CredentialIOError: If the file cannot be read, or the canonical
                copy cannot be written.
            DeserializationError: If the file is not a valid credential.
                The file is left untouched.
        """
        path = Path(path)
        try:
            with open(path, "rb") as f:
                try:
                    self.enforcer.enforce(path)
                except PermissionEnforcementError as e:
                    logger.warning(
                        "permission_enforcement_failed", path=str(path), error=str(e)
                    )
                raw = f.read()
        except OSError as e:
            raise CredentialIOError(f"Failed to read {path}: {e}") from e

        try:
            record = CredentialRecord.model_validate(json.loads(raw))
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            raise DeserializationError(f"Malformed credential file {path}: {e}") from e
        except ValidationError as e:
            raise DeserializationError(f"Invalid credential in {path}: {e}") from e

        canonical = self.resolve_credential_path(record.name)
        self.save(record, canonical)
        logger.debug(
            "credential_loaded",
            name=record.name,
            source=str(path),
            canonical=str(canonical),
        )
        return record

    def list_names(self) -> list[str]:
        """List the names of stored credentials.

        Returns:
            Credential names in the order the filesystem enumerates them.

        Raises:
            CredentialIOError: If the credentials directory does not exist
                or cannot be read.
        """
        directory = self.resolve_credentials_dir()
        try:
            with os.scandir(directory) as entries:
                names = [
                    entry.name[: -len(CREDENTIAL_SUFFIX)]
                    for entry in entries
                    if entry.name.endswith(CREDENTIAL_SUFFIX)
                    and entry.is_file()
                ]
        except OSError as e:
            raise CredentialIOError(
                f"Failed to read credential directory {directory}: {e}"
            ) from e

        logger.debug("listed_credentials", count=len(names), directory=str(directory))
        return names
