"""
dclient keystore: local storage for named Ed25519 signing keypairs.

Keypairs are generated from the operating system's entropy source and kept
one JSON file per name in a per-user data directory, readable only by the
owner on POSIX systems. Files imported from elsewhere are copied into that
directory under their own name.
"""

__version__ = "0.1.0"

from .audit.logger import configure_logger

configure_logger()
