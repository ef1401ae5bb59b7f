#!/usr/bin/env python3
"""Copayer credentials tool — generate, inspect and convert credentials.

    # Generate a fresh credential and print its compact export
    python -m copayer_credentials.tools.credentials_tool generate [livenet|testnet]

    # Show the identity behind a compact export
    python -m copayer_credentials.tools.credentials_tool info <compact>

    # Expand a compact export to the full storage mapping (JSON)
    python -m copayer_credentials.tools.credentials_tool export-full <compact>

    # Migrate a legacy wallet JSON file and print the compact export
    python -m copayer_credentials.tools.credentials_tool migrate <wallet.json>

Settings come from ``COPAYER_*`` environment variables (see
:class:`~copayer_credentials.config.settings.AppConfig`).
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from copayer_credentials.config.settings import AppConfig, Network
from copayer_credentials.credentials.credentials import Credentials
from copayer_credentials.errors.credential_errors import CredentialsError

logger = logging.getLogger(__name__)


def _import(config: AppConfig, compact: str) -> Credentials:
    return Credentials.import_compressed(
        compact,
        supported_versions=config.compact.supported_versions,
        strict_version=config.compact.strict_version,
    )


def _cmd_generate(config: AppConfig, network: Network | None = None) -> None:
    """Generate a new credential and print its compact export."""
    credentials = Credentials.create(network or config.network)
    print(f"Network:    {credentials.network}")
    print(f"Copayer ID: {credentials.copayer_id}")
    print(f"xPubKey:    {credentials.xpub_key}")
    print()
    print("Compact export (keep it secret):")
    print(credentials.export_compressed())


def _cmd_info(config: AppConfig, compact: str) -> None:
    """Print the identity of a compact export."""
    credentials = _import(config, compact)
    complete = credentials.is_complete()
    print(f"Network:     {credentials.network}")
    print(f"Copayer ID:  {credentials.copayer_id}")
    print(f"xPubKey:     {credentials.xpub_key}")
    print(f"Request key: {credentials.request_pub_key}")
    print(f"Can sign:    {credentials.can_sign()}")
    if credentials.m and credentials.n:
        print(f"Policy:      {credentials.m}-of-{credentials.n}")
    print(f"Complete:    {complete}")
    if complete:
        print(f"Temporary request keys: {credentials.has_temporary_request_keys()}")


def _cmd_export_full(config: AppConfig, compact: str) -> None:
    """Print the full storage mapping of a compact export."""
    print(json.dumps(_import(config, compact).to_dict(), indent=2))


def _cmd_migrate(config: AppConfig, path: str) -> None:
    """Migrate a legacy wallet file and print its compact export."""
    old_wallet = json.loads(Path(path).read_text(encoding="utf-8"))
    credentials = Credentials.from_legacy(old_wallet)
    temporary = sum(1 for e in credentials.public_key_ring or () if e.is_temporary_request_key)
    print(f"Copayer ID: {credentials.copayer_id}")
    print(f"Copayers:   {len(credentials.public_key_ring or ())} ({temporary} temporary)")
    print()
    print(credentials.export_compressed())


_USAGE = {
    "generate": "Usage: credentials_tool generate [livenet|testnet]",
    "info": "Usage: credentials_tool info <compact>",
    "export-full": "Usage: credentials_tool export-full <compact>",
    "migrate": "Usage: credentials_tool migrate <wallet.json>",
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(__doc__)
        return 1

    config = AppConfig()
    logging.basicConfig(level=config.effective_log_level)

    cmd = args[0].lower()
    try:
        if cmd == "generate":
            network = args[1].lower() if len(args) > 1 else None
            if network is not None and network not in {n.value for n in Network}:
                print(_USAGE[cmd])
                return 1
            _cmd_generate(config, Network(network) if network else None)
        elif cmd in _USAGE:
            if len(args) < 2:
                print(_USAGE[cmd])
                return 1
            if cmd == "info":
                _cmd_info(config, args[1])
            elif cmd == "export-full":
                _cmd_export_full(config, args[1])
            else:
                _cmd_migrate(config, args[1])
        else:
            print(f"Unknown command: {cmd}")
            print(__doc__)
            return 1
    except CredentialsError as exc:
        logger.error("%s failed: %s (%s)", cmd, exc.message, exc.code)
        return 2
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("%s failed: %s", cmd, exc)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
