"""Credential store tests — bcrypt hashing and verification."""

import pytest

from canwegame.auth.password import hash_password, verify_password
from canwegame.errors import InternalError


@pytest.mark.parametrize("password", ["Secret1!", "correct horse battery staple", "pässwörd-ünïcode"])
def test_hash_then_verify(password):
    assert verify_password(password, hash_password(password))


def test_same_password_hashes_differently():
    """Fresh salt per call: hashes differ, yet both verify."""
    first = hash_password("Secret1!")
    second = hash_password("Secret1!")
    assert first != second
    assert verify_password("Secret1!", first)
    assert verify_password("Secret1!", second)


def test_wrong_password_rejected():
    assert not verify_password("wrong", hash_password("Secret1!"))


def test_hash_embeds_cost():
    assert hash_password("Secret1!", rounds=5).startswith("$2b$05$")


def test_long_password_truncated_to_bcrypt_limit():
    """bcrypt only sees 72 bytes; longer input must not raise."""
    long_pw = "a" * 100
    hashed = hash_password(long_pw)
    assert verify_password(long_pw, hashed)
    assert verify_password("a" * 72, hashed)


def test_malformed_stored_hash_is_internal_error():
    """A corrupt hash is a server-side fault, not a failed login."""
    with pytest.raises(InternalError):
        verify_password("Secret1!", "not-a-bcrypt-hash")
