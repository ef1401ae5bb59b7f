"""Shared test fixtures for the copayer-credentials test suite."""

from __future__ import annotations

import dataclasses

import pytest

from copayer_credentials.bitcoin.keys import ExtendedKey
from copayer_credentials.credentials.credentials import Credentials
from copayer_credentials.credentials.expansion import BASE_ADDRESS_DERIVATION

# BIP32 test vector 1 seed
SEED_1 = bytes.fromhex("000102030405060708090a0b0c0d0e0f")

# Scalar from BIP32 test vector 1 (m/0H private key)
REQUEST_PRIVKEY_HEX = "edb2e14f9ee77d26dd93b4ecede8d16ed408ce149b6cd80b0715a2d911a0afea"


def master_for(seed_byte: int, *, testnet: bool = False) -> ExtendedKey:
    """A deterministic master key built from a repeated seed byte."""
    return ExtendedKey.from_seed(bytes([seed_byte]) * 32, testnet=testnet)


def address_xpub(master: ExtendedKey) -> str:
    """The xPub a credential derives from *master*."""
    return master.derive_path(BASE_ADDRESS_DERIVATION).neuter().to_string()


def off_curve_xpub(master: ExtendedKey) -> str:
    """A checksum-valid xPub whose key bytes (x = 5) are not on secp256k1."""
    root = master.derive_path(BASE_ADDRESS_DERIVATION).neuter()
    return dataclasses.replace(root, key=b"\x02" + (5).to_bytes(32, "big")).to_string()


def zero_key_xprv(master: ExtendedKey) -> str:
    """A checksum-valid xPrv whose private scalar is zero."""
    return dataclasses.replace(master, key=b"\x00" * 32).to_string()


@pytest.fixture
def master() -> ExtendedKey:
    return ExtendedKey.from_seed(SEED_1)


@pytest.fixture
def testnet_master() -> ExtendedKey:
    return ExtendedKey.from_seed(SEED_1, testnet=True)


@pytest.fixture
def signing_credentials(master: ExtendedKey) -> Credentials:
    """A signing credential imported from the vector 1 master key."""
    return Credentials.from_extended_private_key(master.to_string())


@pytest.fixture
def watch_only_credentials(master: ExtendedKey) -> Credentials:
    """A watch-only credential built from an xPub plus a request key."""
    return Credentials.from_extended_public_key(address_xpub(master), REQUEST_PRIVKEY_HEX)


@pytest.fixture
def legacy_wallet() -> dict:
    """A 3-copayer legacy wallet where this copayer is listed second."""
    me = master_for(0x02)
    return {
        "opts": {"id": "legacy-wallet", "requiredCopayers": 2, "totalCopayers": 3},
        "privateKey": {"extendedPrivateKeyString": me.to_string()},
        "publicKeyRing": {
            "copayersExtPubKeys": [
                address_xpub(master_for(0x01)),
                address_xpub(me),
                address_xpub(master_for(0x03)),
            ],
        },
    }
