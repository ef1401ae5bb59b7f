"""Error taxonomy for credential construction, import and export."""

from __future__ import annotations

from copayer_credentials.errors.credential_errors import (
    CredentialsError,
    FormatError,
    StateError,
    ValidationError,
)

__all__ = ["CredentialsError", "FormatError", "StateError", "ValidationError"]
