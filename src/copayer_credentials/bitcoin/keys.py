"""BIP32 extended keys — Base58Check codec, child derivation, network detection.

The hierarchical-deterministic primitives every credential is built from:
- Extended key serialization / deserialization (xpub/xprv, tpub/tprv)
- Private-from-private, public-from-private and public-from-public derivation
- Path derivation from ``m/45'``-style strings
- Network inference from an encoded extended public key
"""

from __future__ import annotations

import hashlib
import hmac
import struct
from dataclasses import dataclass, replace
from typing import Self

from ecdsa import SECP256k1, SigningKey
from ecdsa.ellipticcurve import INFINITY, Point, PointJacobi

from copayer_credentials.config.settings import Network
from copayer_credentials.utils.crypto import hash160, sha256d

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_CURVE = SECP256k1
_CURVE_ORDER = _CURVE.order
_CURVE_GEN = _CURVE.generator

HARDENED_OFFSET = 0x80000000

# (is_private, testnet) → BIP32 version bytes
_VERSIONS: dict[tuple[bool, bool], bytes] = {
    (True, False): b"\x04\x88\xad\xe4",  # xprv
    (False, False): b"\x04\x88\xb2\x1e",  # xpub
    (True, True): b"\x04\x35\x83\x94",  # tprv
    (False, True): b"\x04\x35\x87\xcf",  # tpub
}
_VERSION_LOOKUP = {version: flags for flags, version in _VERSIONS.items()}

_MASTER_HMAC_KEY = b"Bitcoin seed"
_SERIALIZED_LENGTH = 78


# ---------------------------------------------------------------------------
# Base58Check
# ---------------------------------------------------------------------------

_B58_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def base58_encode(payload: bytes) -> str:
    """Encode raw bytes to Base58 (no checksum)."""
    n = int.from_bytes(payload, "big")
    digits = bytearray()
    while n > 0:
        n, remainder = divmod(n, 58)
        digits.append(_B58_ALPHABET[remainder])
    leading = len(payload) - len(payload.lstrip(b"\x00"))
    digits.extend(_B58_ALPHABET[:1] * leading)
    return bytes(reversed(digits)).decode("ascii")


def base58_decode(s: str) -> bytes:
    """Decode a Base58 string to raw bytes (no checksum).

    Raises:
        ValueError: If *s* contains a character outside the Base58 alphabet.
    """
    n = 0
    for char in s:
        index = _B58_ALPHABET.find(char.encode("ascii", "replace"))
        if index < 0:
            msg = f"Invalid Base58 character: {char!r}"
            raise ValueError(msg)
        n = n * 58 + index
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""
    leading = len(s) - len(s.lstrip("1"))
    return b"\x00" * leading + body


def base58check_encode(payload: bytes) -> str:
    """Append a 4-byte double-SHA256 checksum and Base58-encode."""
    return base58_encode(payload + sha256d(payload)[:4])


def base58check_decode(s: str) -> bytes:
    """Decode a Base58Check string and verify its checksum.

    Raises:
        ValueError: If the string is too short or the checksum is invalid.
    """
    raw = base58_decode(s)
    if len(raw) < 4:
        msg = "Base58Check string too short"
        raise ValueError(msg)
    payload, checksum = raw[:-4], raw[-4:]
    if sha256d(payload)[:4] != checksum:
        msg = "Base58Check checksum mismatch"
        raise ValueError(msg)
    return payload


# ---------------------------------------------------------------------------
# secp256k1 helpers
# ---------------------------------------------------------------------------


def _check_private_key(privkey_bytes: bytes) -> None:
    if len(privkey_bytes) != 32:
        msg = f"Private key must be 32 bytes, got {len(privkey_bytes)}"
        raise ValueError(msg)
    if not 0 < int.from_bytes(privkey_bytes, "big") < _CURVE_ORDER:
        msg = "Private key out of range"
        raise ValueError(msg)


def private_key_to_public_key(privkey_bytes: bytes) -> bytes:
    """Return the 33-byte compressed SEC public key for a 32-byte scalar.

    Raises:
        ValueError: If the scalar is not in ``[1, n - 1]``.
    """
    _check_private_key(privkey_bytes)
    vk = SigningKey.from_string(privkey_bytes, curve=_CURVE).get_verifying_key()
    return vk.to_string("compressed")


def _point_from_compressed(compressed: bytes) -> Point:
    if len(compressed) != 33 or compressed[0] not in (0x02, 0x03):
        msg = f"Invalid compressed public key: {compressed.hex()}"
        raise ValueError(msg)
    p = _CURVE.curve.p()
    x = int.from_bytes(compressed[1:], "big")
    # y^2 = x^3 + 7
    y_squared = (pow(x, 3, p) + 7) % p
    y = pow(y_squared, (p + 1) // 4, p)
    if x >= p or y * y % p != y_squared:
        msg = f"Invalid compressed public key: {compressed.hex()} is not on the curve"
        raise ValueError(msg)
    if (y % 2 == 0) != (compressed[0] == 0x02):
        y = p - y
    return Point(_CURVE.curve, x, y)


def _point_to_compressed(point: Point | PointJacobi) -> bytes:
    prefix = b"\x02" if point.y() % 2 == 0 else b"\x03"
    return prefix + point.x().to_bytes(32, "big")


# ---------------------------------------------------------------------------
# BIP32 extended key
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExtendedKey:
    """A BIP32 extended key (public or private).

    Attributes:
        key: 32-byte private scalar or 33-byte compressed public key.
        chain_code: 32-byte chain code.
        depth: Derivation depth (0 for master).
        parent_fingerprint: First 4 bytes of the parent's Hash160(pubkey).
        child_index: Index used to derive this key from its parent.
        is_private: True if :attr:`key` is a private scalar.
        testnet: True for tprv/tpub keys.
    """

    key: bytes
    chain_code: bytes
    depth: int
    parent_fingerprint: bytes
    child_index: int
    is_private: bool
    testnet: bool = False

    @property
    def network(self) -> Network:
        return Network.TESTNET if self.testnet else Network.LIVENET

    # -- Serialization -----------------------------------------------------

    def serialize(self) -> bytes:
        """Serialize to the 78-byte BIP32 format."""
        key_data = b"\x00" + self.key if self.is_private else self.key
        return (
            _VERSIONS[(self.is_private, self.testnet)]
            + struct.pack("B", self.depth)
            + self.parent_fingerprint
            + struct.pack(">I", self.child_index)
            + self.chain_code
            + key_data
        )

    def to_string(self) -> str:
        """Encode as a Base58Check xprv/xpub/tprv/tpub string."""
        return base58check_encode(self.serialize())

    @classmethod
    def from_string(cls, s: str) -> Self:
        """Decode a Base58Check extended key string.

        Raises:
            ValueError: On bad checksum, length or version bytes, or key material
                that is not a valid secp256k1 scalar or point.
        """
        data = base58check_decode(s)
        if len(data) != _SERIALIZED_LENGTH:
            msg = f"Invalid extended key length: {len(data)}"
            raise ValueError(msg)
        flags = _VERSION_LOOKUP.get(data[:4])
        if flags is None:
            msg = f"Unknown version bytes: {data[:4].hex()}"
            raise ValueError(msg)
        is_private, testnet = flags
        if is_private and data[45] != 0:
            msg = "Invalid private key padding"
            raise ValueError(msg)
        key = data[46:] if is_private else data[45:]
        if is_private:
            _check_private_key(key)
        else:
            _point_from_compressed(key)
        return cls(
            key=key,
            chain_code=data[13:45],
            depth=data[4],
            parent_fingerprint=data[5:9],
            child_index=struct.unpack(">I", data[9:13])[0],
            is_private=is_private,
            testnet=testnet,
        )

    @classmethod
    def from_seed(cls, seed: bytes, *, testnet: bool = False) -> Self:
        """Create a master private key from a 16-64 byte seed.

        Raises:
            ValueError: If the seed length is out of range or yields an
                invalid scalar.
        """
        if not 16 <= len(seed) <= 64:
            msg = f"Seed must be 16-64 bytes, got {len(seed)}"
            raise ValueError(msg)
        digest = hmac.new(_MASTER_HMAC_KEY, seed, hashlib.sha512).digest()
        il, ir = digest[:32], digest[32:]
        if not 0 < int.from_bytes(il, "big") < _CURVE_ORDER:
            msg = "Invalid seed (derived key out of range)"
            raise ValueError(msg)
        return cls(
            key=il,
            chain_code=ir,
            depth=0,
            parent_fingerprint=b"\x00\x00\x00\x00",
            child_index=0,
            is_private=True,
            testnet=testnet,
        )

    # -- Derivation --------------------------------------------------------

    def public_key(self) -> bytes:
        """Return the 33-byte compressed public key."""
        if self.is_private:
            return private_key_to_public_key(self.key)
        return self.key

    def fingerprint(self) -> bytes:
        return hash160(self.public_key())[:4]

    def neuter(self) -> ExtendedKey:
        """Return the public counterpart of this key."""
        if not self.is_private:
            return self
        return replace(self, key=self.public_key(), is_private=False)

    def derive_child(self, index: int) -> ExtendedKey:
        """Derive the child at *index* (``>= HARDENED_OFFSET`` for hardened).

        Raises:
            ValueError: If hardened derivation is requested from a public key
                or the derived key is invalid.
        """
        hardened = index >= HARDENED_OFFSET
        if hardened and not self.is_private:
            msg = "Cannot derive hardened child from public key"
            raise ValueError(msg)

        if hardened:
            data = b"\x00" + self.key + struct.pack(">I", index)
        else:
            data = self.public_key() + struct.pack(">I", index)
        digest = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        il_int = int.from_bytes(digest[:32], "big")
        if il_int >= _CURVE_ORDER:
            msg = "Derived key is invalid (il >= curve order)"
            raise ValueError(msg)

        if self.is_private:
            key_int = (il_int + int.from_bytes(self.key, "big")) % _CURVE_ORDER
            if key_int == 0:
                msg = "Derived key is invalid (key == 0)"
                raise ValueError(msg)
            child_key = key_int.to_bytes(32, "big")
        else:
            point = _CURVE_GEN * il_int + _point_from_compressed(self.key)
            if point == INFINITY:
                msg = "Derived key is invalid (point at infinity)"
                raise ValueError(msg)
            child_key = _point_to_compressed(point)

        return ExtendedKey(
            key=child_key,
            chain_code=digest[32:],
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint(),
            child_index=index,
            is_private=self.is_private,
            testnet=self.testnet,
        )

    def derive_path(self, path: str) -> ExtendedKey:
        """Derive along a BIP32 path such as ``m/1'/0``.

        Apostrophe (') or h marks a hardened step.
        """
        key = self
        for part in path.strip().split("/"):
            if part in ("m", "M", ""):
                continue
            index = int(part.rstrip("'hH"))
            if part.endswith(("'", "h", "H")):
                index += HARDENED_OFFSET
            key = key.derive_child(index)
        return key


def network_from_xpub(xpub: str) -> Network:
    """Infer the network an encoded extended public key belongs to.

    Raises:
        ValueError: If *xpub* is not a valid extended public key.
    """
    key = ExtendedKey.from_string(xpub)
    if key.is_private:
        msg = "Expected an extended public key"
        raise ValueError(msg)
    return key.network
