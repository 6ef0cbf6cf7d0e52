"""
Platform-specific permission enforcement for credential files.

Platform-specific security notes:
- POSIX: credential files are narrowed to mode 0600 whenever any bit
  outside owner read/write is set
- Other (Windows): no POSIX mode bits exist, enforcement is a no-op and
  credential files rely on the protection of the user profile directory
"""

import os
import stat
from pathlib import Path
from typing import Optional, Type

import structlog

from .base import PermissionEnforcer, PermissionEnforcementError

logger = structlog.get_logger(__name__)

OWNER_READ_WRITE = stat.S_IRUSR | stat.S_IWUSR


class PosixPermissionEnforcer(PermissionEnforcer):
    """Resets loose credential file modes to 0600."""

    def enforce(self, path: Path) -> bool:
        try:
            mode = stat.S_IMODE(os.stat(path).st_mode)
            if not mode & ~OWNER_READ_WRITE:
                return False

            os.chmod(path, OWNER_READ_WRITE)
        except OSError as e:
            raise PermissionEnforcementError(
                f"Failed to enforce permissions on {path}: {e}"
            ) from e

        logger.info(
            "permissions_reset",
            path=str(path),
            old_mode=oct(mode),
            new_mode=oct(OWNER_READ_WRITE),
        )
        return True


class NoopPermissionEnforcer(PermissionEnforcer):
    """Enforcer for platforms without POSIX permission bits."""

    def enforce(self, path: Path) -> bool:
        return False


def get_permission_enforcer(
    enforcer_class: Optional[Type[PermissionEnforcer]] = None,
) -> PermissionEnforcer:
    """Get the appropriate permission enforcer for the current platform.

    Args:
        enforcer_class: Optional specific enforcer class to use.

    Returns:
        PermissionEnforcer: Platform-specific enforcer instance.
    """
    if enforcer_class is not None:
        return enforcer_class()

    if os.name == "posix":
        return PosixPermissionEnforcer()
    return NoopPermissionEnforcer()
