"""Local credential storage."""

from .base import (
    KEYPAIR_LENGTH,
    CredentialIOError,
    CredentialRecord,
    DeserializationError,
    KeystoreError,
    PermissionEnforcementError,
    PermissionEnforcer,
    validate_credential_name,
)
from .filesystem import FileCredentialStore
from .paths import credential_path, credentials_dir, platform_data_dir
from .permissions import (
    NoopPermissionEnforcer,
    PosixPermissionEnforcer,
    get_permission_enforcer,
)

__all__ = [
    "KEYPAIR_LENGTH",
    "CredentialIOError",
    "CredentialRecord",
    "DeserializationError",
    "FileCredentialStore",
    "KeystoreError",
    "NoopPermissionEnforcer",
    "PermissionEnforcementError",
    "PermissionEnforcer",
    "PosixPermissionEnforcer",
    "credential_path",
    "credentials_dir",
    "get_permission_enforcer",
    "platform_data_dir",
    "validate_credential_name",
]
