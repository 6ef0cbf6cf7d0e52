"""Platform-specific locations of the credential directory."""

import os
import platform
from pathlib import Path
from typing import Mapping, Optional

from .base import validate_credential_name

KEYPAIRS_DIRNAME = "keypairs"
CREDENTIAL_SUFFIX = ".json"


def platform_data_dir(
    identity: str,
    system: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """Get the per-user application data directory for a program.

    Args:
        identity: Program identity (executable name) used as the directory name.
        system: Platform name as reported by ``platform.system()``.
            Defaults to the running platform.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Path: Data directory for the program on this platform.
    """
    if system is None:
        system = platform.system()
    if environ is None:
        environ = os.environ
    system = system.lower()

    if system == "windows":
        appdata = environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
        return base / identity / "data"
    elif system == "darwin":
        return Path.home() / "Library" / "Application Support" / identity

    # Linux and other POSIX systems use the XDG base directory layout
    xdg_data_home = environ.get("XDG_DATA_HOME", "")
    if xdg_data_home and os.path.isabs(xdg_data_home):
        base = Path(xdg_data_home)
    else:
        base = Path.home() / ".local" / "share"
    return base / identity


def credentials_dir(data_dir: Path) -> Path:
    """Get the directory holding one file per credential."""
    return Path(data_dir) / KEYPAIRS_DIRNAME


def credential_path(data_dir: Path, name: str) -> Path:
    """Map a credential name to its canonical file.

    Raises:
        ValueError: If the name is not a valid credential name.
    """
    validate_credential_name(name)
    return credentials_dir(data_dir) / f"{name}{CREDENTIAL_SUFFIX}"
