"""
Keystore configuration.

Settings are read from ``DCLIENT_*`` environment variables. The program
identity names the data directory and is the executable's name, not the
package's, so renaming the package does not orphan stored credentials.
"""

import re
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .storage.paths import platform_data_dir

DEFAULT_PROGRAM_IDENTITY = "dclient"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_IDENTITY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
_NON_PROGRAM_NAMES = {"__main__", "pytest", "py.test", "ipython"}


def program_identity_from_argv(argv0: Optional[str]) -> str:
    """Derive the program identity from the invoked executable.

    Args:
        argv0: First element of ``sys.argv``.

    Returns:
        The executable's name without extension, or the default identity when
        the process was started through an interpreter or test runner.
    """
    if not argv0:
        return DEFAULT_PROGRAM_IDENTITY

    stem = Path(argv0).name
    for suffix in (".exe", ".py"):
        if stem.lower().endswith(suffix):
            stem = stem[: -len(suffix)]

    if (
        not _IDENTITY_RE.match(stem)
        or stem.lower() in _NON_PROGRAM_NAMES
        or stem.lower().startswith("python")
    ):
        return DEFAULT_PROGRAM_IDENTITY
    return stem


class KeystoreSettings(BaseSettings):
    """Keystore settings from environment variables."""

    model_config = SettingsConfigDict(env_prefix="DCLIENT_")

    program_identity: str = Field(
        default=DEFAULT_PROGRAM_IDENTITY,
        description="Executable name used to namespace the data directory",
    )

    data_dir: Optional[Path] = Field(
        default=None,
        description="Override for the platform data directory",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    log_dir: Optional[Path] = Field(
        default=None,
        description="Directory for log files (default: <data_dir>/logs)",
    )

    @field_validator("program_identity")
    @classmethod
    def _check_identity(cls, value: str) -> str:
        if not _IDENTITY_RE.match(value):
            raise ValueError(f"Invalid program identity: {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    def resolve_data_dir(self) -> Path:
        """Get the effective data directory."""
        if self.data_dir is not None:
            return self.data_dir.expanduser()
        return platform_data_dir(self.program_identity)

    def resolve_log_dir(self) -> Path:
        """Get the effective log directory."""
        if self.log_dir is not None:
            return self.log_dir.expanduser()
        return self.resolve_data_dir() / "logs"
