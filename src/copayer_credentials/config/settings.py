"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``COPAYER_``, nested via ``__``)
2. YAML config file (``config_path`` field or ``COPAYER_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Network(enum.StrEnum):
    """Bitcoin networks an extended key can belong to."""

    LIVENET = "livenet"
    TESTNET = "testnet"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class CompactConfig(BaseSettings):
    """Compact export/import settings."""

    model_config = SettingsConfigDict(
        env_prefix="COPAYER_COMPACT__",
        case_sensitive=False,
    )

    supported_versions: list[str] = Field(
        default_factory=lambda: ["1.0.0"],
        description="Version tags accepted without a warning on import",
    )
    strict_version: bool = Field(
        default=True,
        description="Reject compact payloads whose major version is unknown",
    )


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level configuration for the credentials tool.

    Loads settings from environment variables (``COPAYER_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="COPAYER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    network: Network = Network.LIVENET
    log_level: str = "INFO"
    config_path: str = ""

    compact: CompactConfig = Field(default_factory=CompactConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        for key, val in _load_yaml(config_path).items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()
