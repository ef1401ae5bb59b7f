"""Private key encodings — WIF (Wallet Import Format) and raw hex.

Request and wallet private keys travel either as 64-char hex (the stored
form) or as WIF (the compact export form); :func:`parse_private_key`
accepts both.
"""

from __future__ import annotations

from copayer_credentials.bitcoin.keys import base58check_decode, base58check_encode

_MAINNET_WIF = b"\x80"
_TESTNET_WIF = b"\xef"


def privkey_to_wif(privkey: bytes, *, compressed: bool = True, testnet: bool = False) -> str:
    """Encode a 32-byte private key as WIF.

    Args:
        privkey: 32-byte private key scalar.
        compressed: Append the 0x01 flag marking a compressed public key.
        testnet: Use the testnet version byte.

    Returns:
        WIF-encoded string.
    """
    if len(privkey) != 32:
        msg = f"Invalid private key length: {len(privkey)}"
        raise ValueError(msg)
    payload = (_TESTNET_WIF if testnet else _MAINNET_WIF) + privkey
    if compressed:
        payload += b"\x01"
    return base58check_encode(payload)


def wif_to_privkey(wif: str) -> tuple[bytes, bool, bool]:
    """Decode a WIF string.

    Returns:
        Tuple of (privkey_bytes, compressed, testnet).

    Raises:
        ValueError: If the payload has the wrong length or version byte.
    """
    payload = base58check_decode(wif)
    if len(payload) not in (33, 34):
        msg = f"Invalid WIF payload length: {len(payload)}"
        raise ValueError(msg)
    version = payload[:1]
    if version not in (_MAINNET_WIF, _TESTNET_WIF):
        msg = f"Unknown WIF version byte: {version.hex()}"
        raise ValueError(msg)
    compressed = len(payload) == 34
    if compressed and payload[-1] != 0x01:
        msg = "Invalid WIF compression flag"
        raise ValueError(msg)
    return payload[1:33], compressed, version == _TESTNET_WIF


def parse_private_key(value: str) -> bytes:
    """Return the 32-byte scalar for a hex or WIF encoded private key.

    Raises:
        ValueError: If *value* is neither.
    """
    if len(value) == 64:
        try:
            return bytes.fromhex(value)
        except ValueError:
            pass
    privkey, _, _ = wif_to_privkey(value)
    return privkey
