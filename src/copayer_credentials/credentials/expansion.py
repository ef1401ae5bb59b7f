"""Key expansion — the single source of truth for every derived credential field.

Every construction path funnels into :func:`expand`, which takes one of two
root variants:

- :class:`PrivateRoot` — a master extended private key. The address root and
  the request key pair are derived from it.
- :class:`PublicRoot` — an extended public key plus an externally supplied
  request private key (watch-only or peer import).

The result is an immutable :class:`ExpandedKeys` value; nothing is mutated,
so a failure never leaves a half-built credential behind.
"""

from __future__ import annotations

import dataclasses
import logging

from copayer_credentials.bitcoin.keys import (
    ExtendedKey,
    network_from_xpub,
    private_key_to_public_key,
)
from copayer_credentials.bitcoin.wif import parse_private_key
from copayer_credentials.config.settings import Network
from copayer_credentials.errors import definitions as defs
from copayer_credentials.errors.credential_errors import StateError, ValidationError
from copayer_credentials.utils.crypto import private_key_to_aes_key, xpub_to_copayer_id

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Derivation paths
# ---------------------------------------------------------------------------

BASE_ADDRESS_DERIVATION = "m/45'"
REQUEST_KEY = "m/1'/0"
TMP_REQUEST_KEY = "m/1/1"


# ---------------------------------------------------------------------------
# Root material
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class PrivateRoot:
    """Master extended private key (signing credential)."""

    xpriv_key: str


@dataclasses.dataclass(frozen=True)
class PublicRoot:
    """Extended public key plus the request private key supplied with it."""

    xpub_key: str
    request_priv_key: str | None


RootMaterial = PrivateRoot | PublicRoot


@dataclasses.dataclass(frozen=True)
class ExpandedKeys:
    """Every field derivable from a credential's root material."""

    network: Network
    xpriv_key: str | None
    xpub_key: str
    request_priv_key: str
    request_pub_key: str
    copayer_id: str
    personal_encrypting_key: str


# ---------------------------------------------------------------------------
# Derivation helpers
# ---------------------------------------------------------------------------


def parse_xpriv(xpriv_key: str) -> ExtendedKey:
    """Decode a master extended private key.

    Raises:
        ValidationError: If the string is not an extended private key.
    """
    try:
        key = ExtendedKey.from_string(xpriv_key)
    except ValueError as exc:
        msg = f"invalid extended private key: {exc}"
        raise ValidationError(msg, code="invalid-xpriv") from exc
    if not key.is_private:
        msg = "invalid extended private key: got a public key"
        raise ValidationError(msg, code="invalid-xpriv")
    return key


def derive_request_key(master: ExtendedKey) -> tuple[bytes, bytes]:
    """Return the (private, compressed public) request key pair of *master*."""
    child = master.derive_path(REQUEST_KEY)
    return child.key, child.public_key()


def derive_temporary_request_pub_key(xpub_key: str) -> str:
    """Derive the placeholder request public key for a peer's public root.

    Raises:
        ValidationError: If *xpub_key* is not an extended public key.
    """
    try:
        key = ExtendedKey.from_string(xpub_key)
    except ValueError as exc:
        msg = f"invalid extended public key: {exc}"
        raise ValidationError(msg, code="invalid-xpub") from exc
    if key.is_private:
        msg = "invalid extended public key: got a private key"
        raise ValidationError(msg, code="invalid-xpub")
    try:
        child = key.derive_path(TMP_REQUEST_KEY)
    except ValueError as exc:
        msg = f"invalid extended public key: {exc}"
        raise ValidationError(msg, code="invalid-xpub") from exc
    return child.public_key().hex()


def infer_network(xpub_key: str) -> Network:
    """Network encoded in *xpub_key*.

    Raises:
        ValidationError: If *xpub_key* is not an extended public key.
    """
    try:
        return network_from_xpub(xpub_key)
    except ValueError as exc:
        msg = f"invalid extended public key: {exc}"
        raise ValidationError(msg, code="invalid-xpub") from exc


def check_network(asserted: Network | str | None, inferred: Network) -> Network:
    """Reconcile a caller-asserted network with the one inferred from keys.

    Raises:
        StateError: If *asserted* is set and differs from *inferred*.
    """
    if asserted is None:
        return inferred
    if asserted != inferred:
        msg = f"network mismatch: asserted {asserted}, key material is {inferred}"
        raise StateError(msg, code="network-mismatch")
    return inferred


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------


def expand(root: RootMaterial | None, *, network: Network | str | None = None) -> ExpandedKeys:
    """Derive all dependent key material from *root*.

    Args:
        root: The credential's root material.
        network: Network the caller expects; checked against the key.

    Raises:
        StateError: If *root* is missing or the network does not match.
        ValidationError: If the key material cannot be decoded, or a public
            root comes without a request private key.
    """
    if root is None:
        raise defs.ErrNoRootMaterial

    if isinstance(root, PrivateRoot):
        master = parse_xpriv(root.xpriv_key)
        xpriv_key: str | None = root.xpriv_key
        xpub_key = master.derive_path(BASE_ADDRESS_DERIVATION).neuter().to_string()
        request_priv, request_pub = derive_request_key(master)
    else:
        if not root.request_priv_key:
            raise defs.ErrMissingRequestKey
        xpriv_key = None
        xpub_key = root.xpub_key
        try:
            request_priv = parse_private_key(root.request_priv_key)
            request_pub = private_key_to_public_key(request_priv)
        except ValueError as exc:
            msg = f"invalid request private key: {exc}"
            raise ValidationError(msg, code="invalid-request-key") from exc

    resolved = check_network(network, infer_network(xpub_key))
    copayer_id = xpub_to_copayer_id(xpub_key)
    logger.debug("Expanded credential %s on %s", copayer_id[:16], resolved)

    return ExpandedKeys(
        network=resolved,
        xpriv_key=xpriv_key,
        xpub_key=xpub_key,
        request_priv_key=request_priv.hex(),
        request_pub_key=request_pub.hex(),
        copayer_id=copayer_id,
        personal_encrypting_key=private_key_to_aes_key(request_priv),
    )
