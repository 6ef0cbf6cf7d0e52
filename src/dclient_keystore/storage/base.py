"""Base interfaces and types for credential storage."""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

KEYPAIR_LENGTH = 64
SEED_LENGTH = 32


def validate_credential_name(name: str) -> str:
    """Check that a credential name is usable as a file stem.

    Args:
        name: The human-chosen credential name.

    Returns:
        The name, unchanged.

    Raises:
        ValueError: If the name is empty, could escape the keypairs directory,
            or cannot be encoded for the filesystem.
    """
    if not isinstance(name, str) or not name:
        raise ValueError("Credential name must be a non-empty string")
    if name in (".", "..") or any(c in name for c in ("/", "\\", "\x00")):
        raise ValueError(f"Invalid credential name: {name!r}")
    try:
        os.fsencode(name)
    except UnicodeEncodeError as e:
        raise ValueError(f"Credential name cannot be used as a file name: {name!r}") from e
    return name


class CredentialRecord(BaseModel):
    """A named Ed25519 keypair.

    ``keypair_bytes`` holds the 32-byte private seed followed by the 32-byte
    public key. On disk it is written under the ``keypair`` key as an array
    of integers so the file stays plain JSON.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str
    keypair_bytes: bytes = Field(alias="keypair", repr=False)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return validate_credential_name(value)

    @field_validator("keypair_bytes", mode="before")
    @classmethod
    def _coerce_keypair(cls, value: Any) -> bytes:
        if isinstance(value, (bytes, bytearray)):
            data = bytes(value)
        elif isinstance(value, (list, tuple)):
            if any(isinstance(b, bool) or not isinstance(b, int) for b in value):
                raise ValueError("keypair must be an array of integers")
            if any(b < 0 or b > 255 for b in value):
                raise ValueError("keypair values must be in the range 0-255")
            data = bytes(value)
        else:
            raise ValueError("keypair must be an array of byte values")

        if len(data) != KEYPAIR_LENGTH:
            raise ValueError(
                f"keypair must be exactly {KEYPAIR_LENGTH} bytes, got {len(data)}"
            )
        return data

    @field_serializer("keypair_bytes")
    def _serialize_keypair(self, value: bytes) -> list[int]:
        return list(value)

    @property
    def public_key_bytes(self) -> bytes:
        """Raw 32-byte public key."""
        return self.keypair_bytes[SEED_LENGTH:]

    def signing_key(self) -> Ed25519PrivateKey:
        """Build the private signing key from the stored seed."""
        return Ed25519PrivateKey.from_private_bytes(self.keypair_bytes[:SEED_LENGTH])

    def to_document(self) -> dict[str, Any]:
        """Return the on-disk JSON document for this record."""
        return self.model_dump(by_alias=True)


class PermissionEnforcer(ABC):
    """Narrows credential file permissions to owner-only access."""

    @abstractmethod
    def enforce(self, path: Path) -> bool:
        """Restrict the permissions of a credential file.

        Args:
            path: File to inspect and, if needed, fix.

        Returns:
            True if the permissions were changed.

        Raises:
            PermissionEnforcementError: If the permissions cannot be read or set.
        """
        ...


class KeystoreError(Exception):
    """Base exception for keystore operations."""


class CredentialIOError(KeystoreError):
    """Exception raised when reading or writing credential files fails."""


class DeserializationError(KeystoreError):
    """Exception raised when a stored credential cannot be decoded."""


class PermissionEnforcementError(KeystoreError):
    """Exception raised when credential file permissions cannot be enforced."""
