"""Cryptographic helpers — hashing, symmetric key derivation, copayer IDs."""

from __future__ import annotations

import base64
import hashlib


def sha256(data: bytes) -> bytes:
    """Single SHA-256 hash."""
    return hashlib.sha256(data).digest()


def sha256d(data: bytes) -> bytes:
    """Double SHA-256 hash (SHA256(SHA256(data)))."""
    return sha256(sha256(data))


def ripemd160(data: bytes) -> bytes:
    """RIPEMD-160 hash."""
    h = hashlib.new("ripemd160")
    h.update(data)
    return h.digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160(SHA-256(data)) — standard Bitcoin Hash160."""
    return ripemd160(sha256(data))


def private_key_to_aes_key(privkey_bytes: bytes) -> str:
    """Derive a 128-bit symmetric key from a 32-byte EC private key.

    Returns the first 16 bytes of SHA-256(privkey), base64 encoded. Used for
    both the personal and the shared encrypting key.
    """
    if len(privkey_bytes) != 32:
        msg = f"Invalid private key length: {len(privkey_bytes)}"
        raise ValueError(msg)
    return base64.b64encode(sha256(privkey_bytes)[:16]).decode("ascii")


def xpub_to_copayer_id(xpub_str: str) -> str:
    """Compute the copayer ID — SHA-256 hex digest of the xPub string."""
    return sha256(xpub_str.encode("utf-8")).hex()
