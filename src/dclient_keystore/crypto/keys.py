"""Ed25519 keypair generation."""

import os

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
import structlog

from ..storage.base import SEED_LENGTH, CredentialRecord, KeystoreError

logger = structlog.get_logger(__name__)


class EntropyError(KeystoreError):
    """Exception raised when the OS entropy source is unavailable."""


def generate_keypair() -> bytes:
    """Generate a fresh Ed25519 keypair.

    The private seed is drawn from ``os.urandom``. A failing entropy source is
    not retried.

    Returns:
        64 bytes: the 32-byte private seed followed by the 32-byte public key.

    Raises:
        EntropyError: If the OS entropy source cannot provide randomness.
    """
    try:
        seed = os.urandom(SEED_LENGTH)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"Secure random source unavailable: {e}") from e

    public_key = Ed25519PrivateKey.from_private_bytes(seed).public_key()
    return seed + public_key.public_bytes_raw()


def generate(name: str) -> CredentialRecord:
    """Generate a new credential record.

    Args:
        name: Name to bind the keypair to.

    Returns:
        A record holding a freshly generated keypair.

    Raises:
        EntropyError: If the OS entropy source cannot provide randomness.
        ValueError: If the name is not a valid credential name.
    """
    record = CredentialRecord(name=name, keypair_bytes=generate_keypair())
    logger.debug("generated_keypair", name=name)
    return record
