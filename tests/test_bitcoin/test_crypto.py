"""Tests for crypto utility functions."""

from __future__ import annotations

import base64
import hashlib

import pytest

from copayer_credentials.utils.crypto import (
    hash160,
    private_key_to_aes_key,
    ripemd160,
    sha256,
    sha256d,
    xpub_to_copayer_id,
)


def test_sha256():
    """SHA-256 of empty string should produce the well-known hash."""
    result = sha256(b"")
    assert result.hex() == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_sha256d():
    assert sha256d(b"") == sha256(sha256(b""))


def test_hash160():
    """Hash160 should be RIPEMD160(SHA256(data))."""
    assert hash160(b"hello") == ripemd160(sha256(b"hello"))


class TestPrivateKeyToAESKey:
    def test_is_truncated_sha256(self) -> None:
        privkey = bytes(range(32))
        key = private_key_to_aes_key(privkey)
        assert base64.b64decode(key) == hashlib.sha256(privkey).digest()[:16]

    def test_length(self) -> None:
        # 16 bytes -> 24 base64 chars
        assert len(private_key_to_aes_key(b"\x11" * 32)) == 24

    def test_deterministic(self) -> None:
        assert private_key_to_aes_key(b"\x22" * 32) == private_key_to_aes_key(b"\x22" * 32)

    def test_rejects_wrong_length(self) -> None:
        with pytest.raises(ValueError, match="length"):
            private_key_to_aes_key(b"\x22" * 33)


def test_copayer_id_is_sha256_hex_of_xpub():
    xpub = "xpub661MyMwAqRbcFtXgS5sYJABqqG9YLmC4Q1Rdap9gSE8NqtwybGhePY2gZ29ESFjqJo"
    assert xpub_to_copayer_id(xpub) == hashlib.sha256(xpub.encode()).hexdigest()
    assert len(xpub_to_copayer_id(xpub)) == 64
