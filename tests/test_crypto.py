"""Tests for keypair generation."""

from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from dclient_keystore.crypto import EntropyError, generate, generate_keypair
from dclient_keystore.storage import KEYPAIR_LENGTH, KeystoreError


def test_generate_keypair_layout():
    """Test the keypair is the private seed followed by its public key."""
    keypair = generate_keypair()
    assert len(keypair) == KEYPAIR_LENGTH

    public_key = Ed25519PrivateKey.from_private_bytes(keypair[:32]).public_key()
    assert public_key.public_bytes_raw() == keypair[32:]


def test_generate_record():
    """Test generate binds a keypair to the given name."""
    record = generate("bob")
    assert record.name == "bob"
    assert len(record.keypair_bytes) == KEYPAIR_LENGTH


def test_generate_is_fresh():
    """Test two generations with the same name produce different keys."""
    first = generate("bob")
    second = generate("bob")
    assert first.keypair_bytes != second.keypair_bytes
    assert first != second


def test_generate_invalid_name():
    """Test generation rejects names that cannot be stored."""
    with pytest.raises(ValueError):
        generate("")


@pytest.mark.parametrize("failure", [NotImplementedError("no source"), OSError("ENOSYS")])
def test_entropy_failure(failure: Exception):
    """Test a failing entropy source raises EntropyError."""
    with patch("dclient_keystore.crypto.keys.os.urandom", side_effect=failure):
        with pytest.raises(EntropyError) as exc_info:
            generate("bob")

    assert isinstance(exc_info.value, KeystoreError)
    assert exc_info.value.__cause__ is failure
