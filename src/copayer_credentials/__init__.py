"""Copayer credentials — key derivation and backup for multisig HD wallets."""

from __future__ import annotations

from copayer_credentials.credentials import Credentials, PublicKeyRing, PublicKeyRingEntry

__version__ = "0.1.0"

__all__ = ["Credentials", "PublicKeyRing", "PublicKeyRingEntry", "__version__"]
