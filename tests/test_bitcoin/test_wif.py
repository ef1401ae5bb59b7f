"""Tests for private key encodings — bitcoin/wif.py."""

from __future__ import annotations

import pytest

from copayer_credentials.bitcoin.wif import parse_private_key, privkey_to_wif, wif_to_privkey

_PRIVKEY = bytes.fromhex("0c28fca386c7a227600b2fe50b7cae11ec86d3bf1fbe471be89827e19d72aa1d")
_WIF_UNCOMPRESSED = "5HueCGU8rMjxEXxiPuD5BDku4MkFqeZyd4dZ1jvhTVqvbTLvyTJ"
_WIF_COMPRESSED = "KwdMAjGmerYanjeui5SHS7JkmpZvVipYvB2LJGU1ZxJwYvP98617"


class TestWIF:
    def test_encode_uncompressed(self) -> None:
        assert privkey_to_wif(_PRIVKEY, compressed=False) == _WIF_UNCOMPRESSED

    def test_encode_compressed(self) -> None:
        assert privkey_to_wif(_PRIVKEY) == _WIF_COMPRESSED

    def test_decode_compressed(self) -> None:
        assert wif_to_privkey(_WIF_COMPRESSED) == (_PRIVKEY, True, False)

    def test_decode_uncompressed(self) -> None:
        assert wif_to_privkey(_WIF_UNCOMPRESSED) == (_PRIVKEY, False, False)

    def test_testnet_flag(self) -> None:
        wif = privkey_to_wif(_PRIVKEY, testnet=True)
        assert wif[0] == "c"
        assert wif_to_privkey(wif) == (_PRIVKEY, True, True)

    def test_wrong_length_key(self) -> None:
        with pytest.raises(ValueError, match="length"):
            privkey_to_wif(b"\x01" * 31)


class TestParsePrivateKey:
    def test_hex(self) -> None:
        assert parse_private_key(_PRIVKEY.hex()) == _PRIVKEY

    def test_wif(self) -> None:
        assert parse_private_key(_WIF_COMPRESSED) == _PRIVKEY

    def test_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_private_key("definitely not a key")
