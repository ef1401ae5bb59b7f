"""Credentials — one copayer's identity and key material in a multisig HD wallet.

A credential is created by exactly one of:

- :meth:`Credentials.create` — fresh random master key
- :meth:`Credentials.from_extended_private_key` — import by private root
- :meth:`Credentials.from_extended_public_key` — import by public root
- :meth:`Credentials.from_legacy` — migration from a legacy wallet
- :meth:`Credentials.from_dict` — full deserialization
- :meth:`Credentials.import_compressed` — compact deserialization

All but :meth:`from_dict` derive their dependent fields through
:func:`~copayer_credentials.credentials.expansion.expand`. Afterwards the
credential is only mutated by wallet-info attachment and ring updates.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Iterable, Mapping
from typing import Any, Self

from copayer_credentials.bitcoin.keys import ExtendedKey
from copayer_credentials.bitcoin.wif import parse_private_key
from copayer_credentials.config.settings import Network
from copayer_credentials.credentials.expansion import (
    ExpandedKeys,
    PrivateRoot,
    PublicRoot,
    expand,
)
from copayer_credentials.credentials.ring import PublicKeyRing, PublicKeyRingEntry
from copayer_credentials.errors import definitions as defs
from copayer_credentials.errors.credential_errors import ValidationError
from copayer_credentials.utils.crypto import private_key_to_aes_key

logger = logging.getLogger(__name__)

CREDENTIALS_VERSION = "1.0.0"

RingInput = Iterable[PublicKeyRingEntry | Mapping[str, Any]]


@dataclasses.dataclass(kw_only=True)
class Credentials:
    """A copayer's credential.

    Attributes:
        version: Format tag.
        network: Network inferred from :attr:`xpub_key`.
        xpriv_key: Master extended private key; present iff the credential
            can sign.
        xpub_key: Extended public key of the address root.
        request_priv_key: Hex private half of the request key pair.
        request_pub_key: Hex compressed public half of the request key pair.
        copayer_id: SHA-256 hex of :attr:`xpub_key`.
        public_key_ring: Roster of every copayer's public material.
        wallet_id: Group wallet identifier.
        wallet_name: Group wallet label.
        m: Signing threshold.
        n: Group size.
        wallet_priv_key: Secret shared by every copayer of the wallet.
        personal_encrypting_key: Symmetric key derived from the request key.
        shared_encrypting_key: Symmetric key derived from the wallet key.
        copayer_name: This copayer's label.
    """

    version: str = CREDENTIALS_VERSION
    network: Network | None = None
    xpriv_key: str | None = None
    xpub_key: str | None = None
    request_priv_key: str | None = None
    request_pub_key: str | None = None
    copayer_id: str | None = None
    public_key_ring: PublicKeyRing | None = None
    wallet_id: str | None = None
    wallet_name: str | None = None
    m: int | None = None
    n: int | None = None
    wallet_priv_key: str | None = None
    personal_encrypting_key: str | None = None
    shared_encrypting_key: str | None = None
    copayer_name: str | None = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def _from_expanded(cls, keys: ExpandedKeys, **extra: Any) -> Self:
        return cls(
            network=keys.network,
            xpriv_key=keys.xpriv_key,
            xpub_key=keys.xpub_key,
            request_priv_key=keys.request_priv_key,
            request_pub_key=keys.request_pub_key,
            copayer_id=keys.copayer_id,
            personal_encrypting_key=keys.personal_encrypting_key,
            **extra,
        )

    @classmethod
    def create(cls, network: Network | str = Network.LIVENET) -> Self:
        """Generate a credential from a fresh random master key.

        Raises:
            ValidationError: If *network* is not a known network.
        """
        try:
            network = Network(network)
        except ValueError as exc:
            msg = f"invalid network: {network!r}"
            raise ValidationError(msg, code="invalid-network") from exc
        master = ExtendedKey.from_seed(os.urandom(64), testnet=network == Network.TESTNET)
        credentials = cls._from_expanded(expand(PrivateRoot(master.to_string()), network=network))
        logger.debug("Generated credential %s", credentials.copayer_id)
        return credentials

    @classmethod
    def from_extended_private_key(
        cls, xpriv_key: str, *, network: Network | str | None = None
    ) -> Self:
        """Import a signing credential from its master extended private key.

        Raises:
            ValidationError: If *xpriv_key* cannot be decoded.
            StateError: If *network* disagrees with the key.
        """
        return cls._from_expanded(expand(PrivateRoot(xpriv_key), network=network))

    @classmethod
    def from_extended_public_key(
        cls,
        xpub_key: str,
        request_priv_key: str,
        *,
        network: Network | str | None = None,
    ) -> Self:
        """Import a watch-only credential.

        Args:
            xpub_key: Extended public key of the address root.
            request_priv_key: Request private key, hex or WIF.
            network: Optional expected network.

        Raises:
            ValidationError: If either key cannot be decoded.
            StateError: If *network* disagrees with *xpub_key*.
        """
        return cls._from_expanded(expand(PublicRoot(xpub_key, request_priv_key), network=network))

    @classmethod
    def from_legacy(cls, old_wallet: Mapping[str, Any]) -> Self:
        """Migrate a legacy single-root wallet; see :mod:`.legacy`."""
        from copayer_credentials.credentials.legacy import from_legacy

        return from_legacy(old_wallet, credentials_cls=cls)

    @classmethod
    def import_compressed(
        cls,
        compressed: str,
        *,
        supported_versions: Iterable[str] | None = None,
        strict_version: bool = True,
    ) -> Self:
        """Restore a credential from its compact export; see :mod:`.compact`."""
        from copayer_credentials.credentials.compact import import_compressed

        return import_compressed(
            compressed,
            supported_versions=supported_versions,
            strict_version=strict_version,
            credentials_cls=cls,
        )

    # ------------------------------------------------------------------
    # Wallet info
    # ------------------------------------------------------------------

    def add_wallet_info(
        self,
        wallet_id: str,
        wallet_name: str,
        m: int,
        n: int,
        wallet_priv_key: str | None,
        copayer_name: str,
    ) -> None:
        """Bind this credential to a group wallet.

        A single-signer wallet (``n == 1``) gets its ring seeded with this
        copayer's own entry.

        Raises:
            ValidationError: If *wallet_priv_key* cannot be decoded.
        """
        shared_encrypting_key = None
        if wallet_priv_key:
            try:
                shared_encrypting_key = private_key_to_aes_key(parse_private_key(wallet_priv_key))
            except ValueError as exc:
                msg = f"invalid wallet private key: {exc}"
                raise ValidationError(msg, code="invalid-wallet-key") from exc

        self.wallet_id = wallet_id
        self.wallet_name = wallet_name
        self.m = m
        self.n = n
        self.wallet_priv_key = wallet_priv_key
        self.shared_encrypting_key = shared_encrypting_key
        self.copayer_name = copayer_name

        if n == 1:
            self.add_public_key_ring([self.self_ring_entry()])

    def has_wallet_info(self) -> bool:
        return bool(self.wallet_id)

    # ------------------------------------------------------------------
    # Public key ring
    # ------------------------------------------------------------------

    def self_ring_entry(self) -> PublicKeyRingEntry:
        """This copayer's own (permanent) ring entry."""
        return PublicKeyRingEntry(
            xpub_key=self.xpub_key or "",
            request_pub_key=self.request_pub_key or "",
            is_temporary_request_key=False,
        )

    def add_public_key_ring(self, public_key_ring: RingInput) -> None:
        """Replace the ring with an independent copy of *public_key_ring*.

        The ring length is not checked against :attr:`n`; see
        :meth:`is_complete`.
        """
        self.public_key_ring = PublicKeyRing.from_list(public_key_ring)

    def update_public_key_ring(self, public_key_ring: RingInput) -> int:
        """Upgrade temporary request keys from a peer-published ring.

        Returns:
            The number of entries upgraded.
        """
        if self.public_key_ring is None:
            return 0
        return self.public_key_ring.reconcile(PublicKeyRing.from_list(public_key_ring))

    def can_sign(self) -> bool:
        return bool(self.xpriv_key)

    def is_complete(self) -> bool:
        """True once the threshold is set and every copayer is in the ring."""
        if not self.m or not self.n:
            return False
        return self.public_key_ring is not None and len(self.public_key_ring) == self.n

    def has_temporary_request_keys(self) -> bool | None:
        """Whether any ring entry still carries a placeholder request key.

        Returns ``None`` for an incomplete credential: its ring cannot be
        trusted for authentication at all.
        """
        if not self.is_complete():
            return None
        assert self.public_key_ring is not None
        return self.public_key_ring.has_temporary_request_keys()

    # ------------------------------------------------------------------
    # Full serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize every field for persistent local storage."""
        return {
            "version": self.version,
            "network": str(self.network) if self.network is not None else None,
            "xPrivKey": self.xpriv_key,
            "xPubKey": self.xpub_key,
            "requestPrivKey": self.request_priv_key,
            "requestPubKey": self.request_pub_key,
            "copayerId": self.copayer_id,
            "publicKeyRing": (
                self.public_key_ring.to_list() if self.public_key_ring is not None else None
            ),
            "walletId": self.wallet_id,
            "walletName": self.wallet_name,
            "m": self.m,
            "n": self.n,
            "walletPrivKey": self.wallet_priv_key,
            "personalEncryptingKey": self.personal_encrypting_key,
            "sharedEncryptingKey": self.shared_encrypting_key,
            "copayerName": self.copayer_name,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Rebuild a credential from :meth:`to_dict` output.

        Stored fields are trusted as previously computed; no expansion runs.

        Raises:
            ValidationError: If neither ``xPrivKey`` nor ``xPubKey`` is
                present, or a field has an invalid value.
        """
        if not data.get("xPrivKey") and not data.get("xPubKey"):
            raise defs.ErrMissingRootKey

        network = data.get("network")
        try:
            network = Network(network) if network is not None else None
        except ValueError as exc:
            msg = f"invalid network: {network!r}"
            raise ValidationError(msg, code="invalid-network") from exc

        ring = data.get("publicKeyRing")
        return cls(
            version=data.get("version") or CREDENTIALS_VERSION,
            network=network,
            xpriv_key=data.get("xPrivKey"),
            xpub_key=data.get("xPubKey"),
            request_priv_key=data.get("requestPrivKey"),
            request_pub_key=data.get("requestPubKey"),
            copayer_id=data.get("copayerId"),
            public_key_ring=PublicKeyRing.from_list(ring) if ring is not None else None,
            wallet_id=data.get("walletId"),
            wallet_name=data.get("walletName"),
            m=data.get("m"),
            n=data.get("n"),
            wallet_priv_key=data.get("walletPrivKey"),
            personal_encrypting_key=data.get("personalEncryptingKey"),
            shared_encrypting_key=data.get("sharedEncryptingKey"),
            copayer_name=data.get("copayerName"),
        )

    # ------------------------------------------------------------------
    # Compact export
    # ------------------------------------------------------------------

    def export_compressed(self) -> str:
        """Encode as the compact positional format; see :mod:`.compact`."""
        from copayer_credentials.credentials.compact import export_compressed

        return export_compressed(self)

    def __repr__(self) -> str:
        copayer = self.copayer_id[:16] if self.copayer_id else None
        return (
            f"<Credentials copayer_id={copayer}... network={self.network} "
            f"can_sign={self.can_sign()}>"
        )
