"""Tests for BIP32 extended keys and Base58Check — bitcoin/keys.py."""

from __future__ import annotations

import dataclasses

import pytest

from copayer_credentials.bitcoin.keys import (
    HARDENED_OFFSET,
    ExtendedKey,
    base58_decode,
    base58_encode,
    base58check_decode,
    base58check_encode,
    network_from_xpub,
    private_key_to_public_key,
)
from copayer_credentials.config.settings import Network

# ---------------------------------------------------------------------------
# BIP32 Test Vector 1
# Seed: 000102030405060708090a0b0c0d0e0f
# ---------------------------------------------------------------------------

_SEED_1 = bytes.fromhex("000102030405060708090a0b0c0d0e0f")

_XPRV_M = (
    "xprv9s21ZrQH143K3QTDL4LXw2F7HEK3wJUD2nW2nRk4stbPy6cq3jPPqjiChkVvvNKmPG"
    "JxWUtg6LnF5kejMRNNU3TGtRBeJgk33yuGBxrMPHi"
)
_XPUB_M = (
    "xpub661MyMwAqRbcFtXgS5sYJABqqG9YLmC4Q1Rdap9gSE8NqtwybGhePY2gZ29ESFjqJo"
    "Cu1Rupje8YtGqsefD265TMg7usUDFdp6W1EGMcet8"
)
_XPUB_M_0H = (
    "xpub68Gmy5EdvgibQVfPdqkBBCHxA5htiqg55crXYuXoQRKfDBFA1WEjWgP6LHhwBZeNK1"
    "VTsfTFUHCdrfp1bgwQ9xv5ski8PX9rL2dZXvgGDnw"
)


class TestBase58:
    """Base58 and Base58Check encoding / decoding."""

    def test_encode_empty(self) -> None:
        assert base58_encode(b"") == ""

    def test_leading_zeros(self) -> None:
        data = b"\x00\x00\x00\x01"
        encoded = base58_encode(data)
        assert encoded.startswith("111")
        assert base58_decode(encoded) == data

    def test_invalid_character(self) -> None:
        with pytest.raises(ValueError, match="Invalid Base58 character"):
            base58_decode("0OIl")

    def test_base58check_invalid_checksum(self) -> None:
        encoded = base58check_encode(b"\x00" + b"\xab" * 20)
        corrupted = encoded[:-1] + ("1" if encoded[-1] != "1" else "2")
        with pytest.raises(ValueError, match="checksum"):
            base58check_decode(corrupted)

    def test_base58check_too_short(self) -> None:
        with pytest.raises(ValueError, match="too short"):
            base58check_decode("1")


class TestExtendedKey:
    """BIP32 ExtendedKey operations."""

    def test_master_xprv_matches_vector(self) -> None:
        assert ExtendedKey.from_seed(_SEED_1).to_string() == _XPRV_M

    def test_master_xpub_matches_vector(self) -> None:
        pub = ExtendedKey.from_seed(_SEED_1).neuter()
        assert pub.to_string() == _XPUB_M
        assert not pub.is_private

    def test_hardened_child_matches_vector(self) -> None:
        child = ExtendedKey.from_seed(_SEED_1).derive_path("m/0'")
        assert child.neuter().to_string() == _XPUB_M_0H

    def test_roundtrip_xprv(self) -> None:
        restored = ExtendedKey.from_string(_XPRV_M)
        assert restored.is_private
        assert restored.to_string() == _XPRV_M

    def test_testnet_prefixes(self) -> None:
        master = ExtendedKey.from_seed(_SEED_1, testnet=True)
        assert master.to_string().startswith("tprv")
        assert master.neuter().to_string().startswith("tpub")
        assert master.network == Network.TESTNET

    def test_hardened_derivation_from_public_key_raises(self) -> None:
        pub = ExtendedKey.from_seed(_SEED_1).neuter()
        with pytest.raises(ValueError, match="hardened"):
            pub.derive_child(HARDENED_OFFSET)

    def test_derive_path_h_notation(self) -> None:
        master = ExtendedKey.from_seed(_SEED_1)
        assert master.derive_path("m/1'/0").key == master.derive_path("m/1h/0").key

    def test_public_derivation_matches_private(self) -> None:
        master = ExtendedKey.from_seed(_SEED_1)
        from_private = master.derive_path("m/1/1").neuter()
        from_public = master.neuter().derive_path("m/1/1")
        assert from_private.key == from_public.key
        assert from_private.chain_code == from_public.chain_code

    def test_public_key_is_compressed(self) -> None:
        pubkey = ExtendedKey.from_seed(_SEED_1).public_key()
        assert len(pubkey) == 33
        assert pubkey[0] in (0x02, 0x03)
        assert pubkey == private_key_to_public_key(ExtendedKey.from_seed(_SEED_1).key)

    def test_from_string_invalid_length(self) -> None:
        with pytest.raises(ValueError, match="length"):
            ExtendedKey.from_string(base58check_encode(b"\x00" * 50))

    def test_from_string_unknown_version(self) -> None:
        with pytest.raises(ValueError, match="version"):
            ExtendedKey.from_string(base58check_encode(b"\x01\x02\x03\x04" + b"\x00" * 74))

    @pytest.mark.parametrize(
        "scalar", [b"\x00" * 32, bytes.fromhex("ff" * 32), b"\x01" * 31]
    )
    def test_invalid_private_scalar(self, scalar: bytes) -> None:
        with pytest.raises(ValueError, match="Private key"):
            private_key_to_public_key(scalar)

    def test_from_string_zero_private_key(self) -> None:
        master = ExtendedKey.from_string(_XPRV_M)
        with pytest.raises(ValueError, match="out of range"):
            ExtendedKey.from_string(dataclasses.replace(master, key=b"\x00" * 32).to_string())

    def test_from_string_off_curve_public_key(self) -> None:
        root = ExtendedKey.from_string(_XPUB_M)
        bogus = dataclasses.replace(root, key=b"\x02" + (5).to_bytes(32, "big"))
        with pytest.raises(ValueError, match="not on the curve"):
            ExtendedKey.from_string(bogus.to_string())

    def test_seed_length_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="Seed must be"):
            ExtendedKey.from_seed(b"\x00" * 8)


class TestNetworkFromXpub:
    def test_mainnet(self) -> None:
        assert network_from_xpub(_XPUB_M) == Network.LIVENET

    def test_testnet(self) -> None:
        tpub = ExtendedKey.from_seed(_SEED_1, testnet=True).neuter().to_string()
        assert network_from_xpub(tpub) == Network.TESTNET

    def test_private_key_rejected(self) -> None:
        with pytest.raises(ValueError, match="public"):
            network_from_xpub(_XPRV_M)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ValueError):
            network_from_xpub("not-an-xpub")
