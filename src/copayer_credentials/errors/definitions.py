"""Pre-defined errors for fixed-message failure cases."""

from __future__ import annotations

from copayer_credentials.errors.credential_errors import StateError, ValidationError

# -- Validation ------------------------------------------------------------

ErrMissingRootKey = ValidationError(
    "invalid input: xPrivKey or xPubKey is required", code="missing-root-key"
)
ErrMissingRequestKey = ValidationError(
    "a request private key is required for a public-only credential",
    code="missing-request-key",
)
ErrInvalidLegacyWallet = ValidationError(
    "invalid legacy wallet representation", code="invalid-legacy-wallet"
)

# -- State -----------------------------------------------------------------

ErrNoRootMaterial = StateError(
    "cannot expand a credential without xPrivKey or xPubKey", code="no-root-material"
)
