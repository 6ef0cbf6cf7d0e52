"""Cryptographic key generation for the keystore."""

from .keys import EntropyError, generate, generate_keypair

__all__ = [
    "EntropyError",
    "generate",
    "generate_keypair",
]
