"""Legacy migration — single-root wallets to the ring-based credential model.

A legacy wallet holds one master private key and the extended public keys of
every copayer, but no per-copayer request keys. Migration derives this
copayer's real request key and a deterministic placeholder for each peer::

    {
        "privateKey": {"extendedPrivateKeyString": "xprv..."},
        "publicKeyRing": {"copayersExtPubKeys": ["xpub...", "xpub...", ...]},
    }

Placeholders are flagged ``isTemporaryRequestKey`` and are upgraded later by
:meth:`Credentials.update_public_key_ring` once peers publish their keys.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from copayer_credentials.credentials.credentials import Credentials
from copayer_credentials.credentials.expansion import (
    derive_request_key,
    derive_temporary_request_pub_key,
    parse_xpriv,
)
from copayer_credentials.credentials.ring import PublicKeyRingEntry
from copayer_credentials.errors import definitions as defs
from copayer_credentials.errors.credential_errors import ValidationError

if TYPE_CHECKING:
    from typing import TypeVar

    C = TypeVar("C", bound=Credentials)

logger = logging.getLogger(__name__)


class LegacyPrivateKey(BaseModel):
    model_config = ConfigDict(extra="ignore")

    extended_private_key_string: str = Field(alias="extendedPrivateKeyString")


class LegacyPublicKeyRing(BaseModel):
    model_config = ConfigDict(extra="ignore")

    copayers_ext_pub_keys: list[str] = Field(alias="copayersExtPubKeys")


class LegacyWallet(BaseModel):
    """The parts of a legacy wallet export that migration reads."""

    model_config = ConfigDict(extra="ignore")

    private_key: LegacyPrivateKey = Field(alias="privateKey")
    public_key_ring: LegacyPublicKeyRing = Field(alias="publicKeyRing")


def from_legacy(
    old_wallet: Mapping[str, Any] | LegacyWallet,
    *,
    credentials_cls: type[C] = Credentials,  # type: ignore[assignment]
) -> C:
    """Convert a legacy wallet into a credential with a mixed ring.

    This copayer's entry (the one whose xPub matches the derived address
    root) gets its real request key; every other entry gets a temporary one
    derived from the peer's xPub.

    Raises:
        ValidationError: If the wallet is malformed or holds undecodable keys.
    """
    if isinstance(old_wallet, LegacyWallet):
        wallet = old_wallet
    else:
        try:
            wallet = LegacyWallet.model_validate(old_wallet)
        except pydantic.ValidationError as exc:
            msg = f"{defs.ErrInvalidLegacyWallet.message}: {exc.error_count()} invalid field(s)"
            raise ValidationError(msg, code=defs.ErrInvalidLegacyWallet.code) from exc

    xpriv_key = wallet.private_key.extended_private_key_string
    credentials = credentials_cls.from_extended_private_key(xpriv_key)

    entries = []
    for xpub_key in wallet.public_key_ring.copayers_ext_pub_keys:
        if xpub_key == credentials.xpub_key:
            _, request_pub = derive_request_key(parse_xpriv(xpriv_key))
            entry = PublicKeyRingEntry(xpub_key=xpub_key, request_pub_key=request_pub.hex())
        else:
            entry = PublicKeyRingEntry(
                xpub_key=xpub_key,
                request_pub_key=derive_temporary_request_pub_key(xpub_key),
                is_temporary_request_key=True,
            )
        entries.append(entry)

    credentials.add_public_key_ring(entries)
    logger.debug(
        "Migrated legacy wallet for %s with %d peer(s)",
        credentials.copayer_id,
        len(entries) - 1,
    )
    return credentials
