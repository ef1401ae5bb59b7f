"""Public-key ring — the ordered roster of every copayer's public material.

Entries are keyed internally by ``xPubKey`` (insertion order is the roster
order) so reconciliation is a direct lookup instead of a scan.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from copayer_credentials.errors.credential_errors import ValidationError

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class PublicKeyRingEntry:
    """One copayer's public material."""

    xpub_key: str
    request_pub_key: str
    is_temporary_request_key: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted camelCase field names."""
        return {
            "xPubKey": self.xpub_key,
            "requestPubKey": self.request_pub_key,
            "isTemporaryRequestKey": self.is_temporary_request_key,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PublicKeyRingEntry:
        """Build an entry from its camelCase mapping.

        Raises:
            ValidationError: If ``xPubKey`` or ``requestPubKey`` is missing.
        """
        try:
            return cls(
                xpub_key=data["xPubKey"],
                request_pub_key=data["requestPubKey"],
                is_temporary_request_key=bool(data.get("isTemporaryRequestKey", False)),
            )
        except (KeyError, TypeError) as exc:
            msg = f"invalid public key ring entry: {data!r}"
            raise ValidationError(msg, code="invalid-ring-entry") from exc


class PublicKeyRing:
    """Ordered sequence of :class:`PublicKeyRingEntry`, unique by ``xPubKey``."""

    def __init__(self, entries: Iterable[PublicKeyRingEntry] = ()) -> None:
        self._entries: dict[str, PublicKeyRingEntry] = {}
        for entry in entries:
            if entry.xpub_key in self._entries:
                msg = f"duplicate xPubKey in public key ring: {entry.xpub_key}"
                raise ValidationError(msg, code="duplicate-ring-entry")
            self._entries[entry.xpub_key] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PublicKeyRingEntry]:
        return iter(self._entries.values())

    def __getitem__(self, index: int) -> PublicKeyRingEntry:
        return list(self._entries.values())[index]

    def __contains__(self, xpub_key: object) -> bool:
        return xpub_key in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKeyRing):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"<PublicKeyRing entries={len(self)}>"

    def get(self, xpub_key: str) -> PublicKeyRingEntry | None:
        return self._entries.get(xpub_key)

    def copy(self) -> PublicKeyRing:
        return PublicKeyRing(self)

    def append(self, entry: PublicKeyRingEntry) -> None:
        """Add *entry* at the end of the roster.

        Raises:
            ValidationError: If the ``xPubKey`` is already present.
        """
        if entry.xpub_key in self._entries:
            msg = f"duplicate xPubKey in public key ring: {entry.xpub_key}"
            raise ValidationError(msg, code="duplicate-ring-entry")
        self._entries[entry.xpub_key] = entry

    def without(self, xpub_key: str) -> PublicKeyRing:
        """Return a copy of the ring with the *xpub_key* entry removed."""
        return PublicKeyRing(e for e in self if e.xpub_key != xpub_key)

    def reconcile(self, candidates: Iterable[PublicKeyRingEntry]) -> int:
        """Upgrade temporary entries from authoritative candidate entries.

        A temporary entry takes the candidate's request key only when the
        candidate with the same ``xPubKey`` is itself permanent. Entries are
        never added, removed or reordered.

        Returns:
            The number of entries upgraded.
        """
        authoritative = {
            c.xpub_key: c for c in candidates if not c.is_temporary_request_key
        }
        upgraded = 0
        for xpub_key, entry in self._entries.items():
            if not entry.is_temporary_request_key:
                continue
            candidate = authoritative.get(xpub_key)
            if candidate is None:
                continue
            self._entries[xpub_key] = dataclasses.replace(
                entry,
                request_pub_key=candidate.request_pub_key,
                is_temporary_request_key=candidate.is_temporary_request_key,
            )
            upgraded += 1
        if upgraded:
            logger.info("Upgraded %d temporary request key(s) in public key ring", upgraded)
        return upgraded

    def has_temporary_request_keys(self) -> bool:
        return any(e.is_temporary_request_key for e in self)

    def to_list(self) -> list[dict[str, Any]]:
        return [e.to_dict() for e in self]

    @classmethod
    def from_list(cls, items: Iterable[PublicKeyRingEntry | Mapping[str, Any]]) -> PublicKeyRing:
        """Build a ring from entries or their camelCase mappings."""
        return cls(
            item if isinstance(item, PublicKeyRingEntry) else PublicKeyRingEntry.from_dict(item)
            for item in items
        )
