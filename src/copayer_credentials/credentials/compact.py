"""Compact versioned export — a minimal positional encoding for out-of-band transfer.

The payload is a JSON array whose positions are fixed by
:class:`CompactPayload` (field declaration order)::

    [version, xPrivKey, requestPrivKey, xPubKey, m, n, publicKeyRing, sharedEncryptingKey]

Wallet identity (id, names) is not carried. A signing credential leaves the
``requestPrivKey`` and ``xPubKey`` positions empty since both are re-derived
from ``xPrivKey``; a watch-only credential carries them in full, the request
key as WIF. The copayer's own ring entry is dropped on export and re-inserted
on import.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

from copayer_credentials.bitcoin.wif import privkey_to_wif
from copayer_credentials.config.settings import Network
from copayer_credentials.credentials.credentials import CREDENTIALS_VERSION, Credentials
from copayer_credentials.credentials.expansion import PrivateRoot, PublicRoot, RootMaterial, expand
from copayer_credentials.credentials.ring import PublicKeyRing, PublicKeyRingEntry
from copayer_credentials.errors.credential_errors import FormatError, ValidationError

if TYPE_CHECKING:
    from typing import TypeVar

    C = TypeVar("C", bound=Credentials)

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS: frozenset[str] = frozenset({CREDENTIALS_VERSION})

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class CompactRingEntry(BaseModel):
    """A peer's ring entry as carried on the wire."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    xpub_key: StrictStr = Field(alias="xPubKey")
    request_pub_key: StrictStr = Field(alias="requestPubKey")
    is_temporary_request_key: StrictBool = Field(default=False, alias="isTemporaryRequestKey")

    def to_entry(self) -> PublicKeyRingEntry:
        return PublicKeyRingEntry(
            xpub_key=self.xpub_key,
            request_pub_key=self.request_pub_key,
            is_temporary_request_key=self.is_temporary_request_key,
        )


class CompactPayload(BaseModel):
    """Positional schema of the compact format; field order is wire order."""

    model_config = ConfigDict(frozen=True)

    version: StrictStr
    xpriv_key: StrictStr | None
    request_priv_key: StrictStr | None
    xpub_key: StrictStr | None
    m: StrictInt | None
    n: StrictInt | None
    public_key_ring: list[CompactRingEntry]
    shared_encrypting_key: StrictStr | None

    def to_values(self) -> list[Any]:
        """Wire values in positional order."""
        dumped = self.model_dump(by_alias=True)
        return [dumped[name] for name in COMPACT_FIELDS]


COMPACT_FIELDS: tuple[str, ...] = tuple(CompactPayload.model_fields)


# ---------------------------------------------------------------------------
# Version handling
# ---------------------------------------------------------------------------


def check_version(
    version: str,
    supported_versions: Iterable[str] | None = None,
    *,
    strict: bool = True,
) -> None:
    """Validate a compact payload's version tag.

    Listed versions pass silently. Other versions sharing a supported major
    component pass with a warning. Unknown majors are rejected unless
    *strict* is false.

    Raises:
        FormatError: If the tag is malformed, or its major version is
            unknown and *strict* is set.
    """
    supported = (
        frozenset(supported_versions) if supported_versions is not None else SUPPORTED_VERSIONS
    )
    match = _VERSION_RE.match(version)
    if match is None:
        msg = f"invalid compressed format version: {version!r}"
        raise FormatError(msg, code="invalid-version")
    if version in supported:
        return

    majors = {m.group(1) for m in map(_VERSION_RE.match, supported) if m is not None}
    if match.group(1) not in majors and strict:
        msg = f"unsupported compressed format version: {version}"
        raise FormatError(msg, code="unsupported-version")
    logger.warning("Importing compressed credentials with unlisted version %s", version)


# ---------------------------------------------------------------------------
# Export / import
# ---------------------------------------------------------------------------


def export_compressed(credentials: Credentials) -> str:
    """Encode *credentials* as a compact JSON array string."""
    can_sign = credentials.can_sign()
    request_priv_key = ""
    if not can_sign and credentials.request_priv_key:
        request_priv_key = privkey_to_wif(
            bytes.fromhex(credentials.request_priv_key),
            testnet=credentials.network == Network.TESTNET,
        )
    ring = credentials.public_key_ring or PublicKeyRing()

    payload = CompactPayload(
        version=credentials.version,
        xpriv_key=credentials.xpriv_key or "",
        request_priv_key=request_priv_key,
        xpub_key="" if can_sign else credentials.xpub_key or "",
        m=credentials.m,
        n=credentials.n,
        public_key_ring=[
            CompactRingEntry.model_validate(e.to_dict())
            for e in ring.without(credentials.xpub_key or "")
        ],
        shared_encrypting_key=credentials.shared_encrypting_key,
    )
    return json.dumps(payload.to_values(), separators=(",", ":"))


def _format_error(detail: str) -> FormatError:
    return FormatError(f"invalid compressed format: {detail}")


def parse_compressed(compressed: str) -> CompactPayload:
    """Parse and shape-check a compact export string.

    Raises:
        FormatError: If the text is not a JSON array of the expected arity
            and element types.
    """
    try:
        values = json.loads(compressed)
    except (TypeError, ValueError) as exc:
        raise _format_error(str(exc)) from exc

    if not isinstance(values, list):
        raise _format_error("expected a JSON array")
    if len(values) != len(COMPACT_FIELDS):
        raise _format_error(f"expected {len(COMPACT_FIELDS)} elements, got {len(values)}")

    try:
        return CompactPayload.model_validate(dict(zip(COMPACT_FIELDS, values, strict=True)))
    except pydantic.ValidationError as exc:
        raise _format_error(f"{exc.error_count()} invalid element(s)") from exc


def import_compressed(
    compressed: str,
    *,
    supported_versions: Iterable[str] | None = None,
    strict_version: bool = True,
    credentials_cls: type[C] = Credentials,  # type: ignore[assignment]
) -> C:
    """Restore a credential from :func:`export_compressed` output.

    Raises:
        FormatError: If the payload is malformed, carries an unsupported
            version, or holds undecodable key material.
    """
    payload = parse_compressed(compressed)
    check_version(payload.version, supported_versions, strict=strict_version)

    root: RootMaterial
    if payload.xpriv_key:
        root = PrivateRoot(payload.xpriv_key)
    elif payload.xpub_key:
        root = PublicRoot(payload.xpub_key, payload.request_priv_key or None)
    else:
        raise _format_error("neither xPrivKey nor xPubKey present")

    try:
        keys = expand(root)
        ring = PublicKeyRing.from_list(e.to_entry() for e in payload.public_key_ring)
    except ValidationError as exc:
        raise _format_error(exc.message) from exc

    ring = ring.without(keys.xpub_key)
    ring.append(PublicKeyRingEntry(xpub_key=keys.xpub_key, request_pub_key=keys.request_pub_key))

    credentials = credentials_cls._from_expanded(
        keys,
        m=payload.m,
        n=payload.n,
        public_key_ring=ring,
        shared_encrypting_key=payload.shared_encrypting_key,
    )
    logger.debug("Imported compressed credential %s", keys.copayer_id[:16])
    return credentials
