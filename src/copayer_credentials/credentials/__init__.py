"""Credentials — a copayer's key material, public key ring and export formats."""

from __future__ import annotations

from copayer_credentials.credentials.credentials import CREDENTIALS_VERSION, Credentials
from copayer_credentials.credentials.ring import PublicKeyRing, PublicKeyRingEntry

__all__ = ["CREDENTIALS_VERSION", "Credentials", "PublicKeyRing", "PublicKeyRingEntry"]
