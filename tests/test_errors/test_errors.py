"""Tests for error classes and pre-defined error instances."""

from __future__ import annotations

import pytest

from copayer_credentials.errors import definitions as defs
from copayer_credentials.errors.credential_errors import (
    CredentialsError,
    FormatError,
    StateError,
    ValidationError,
)

# ---------------------------------------------------------------------------
# CredentialsError base class
# ---------------------------------------------------------------------------


class TestCredentialsError:
    def test_default_attributes(self) -> None:
        err = CredentialsError("something broke")
        assert str(err) == "something broke"
        assert err.message == "something broke"
        assert err.code == "credentials-error"

    def test_custom_code(self) -> None:
        err = CredentialsError("bad input", code="bad-input")
        assert err.code == "bad-input"

    def test_is_exception(self) -> None:
        with pytest.raises(CredentialsError, match="boom"):
            raise CredentialsError("boom")


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("cls", "code"),
    [
        (ValidationError, "validation-error"),
        (StateError, "state-error"),
        (FormatError, "format-error"),
    ],
)
def test_subclass_defaults(cls: type[CredentialsError], code: str) -> None:
    err = cls("failed")
    assert isinstance(err, CredentialsError)
    assert err.code == code
    assert err.message == "failed"


def test_subclasses_are_distinct() -> None:
    with pytest.raises(StateError):
        raise StateError("mismatch")
    assert not issubclass(StateError, ValidationError)
    assert not issubclass(FormatError, ValidationError)


# ---------------------------------------------------------------------------
# Pre-defined instances
# ---------------------------------------------------------------------------


class TestDefinitions:
    def test_missing_root_key(self) -> None:
        assert isinstance(defs.ErrMissingRootKey, ValidationError)
        assert defs.ErrMissingRootKey.code == "missing-root-key"

    def test_missing_request_key(self) -> None:
        assert isinstance(defs.ErrMissingRequestKey, ValidationError)

    def test_invalid_legacy_wallet(self) -> None:
        assert isinstance(defs.ErrInvalidLegacyWallet, ValidationError)

    def test_no_root_material(self) -> None:
        assert isinstance(defs.ErrNoRootMaterial, StateError)
        assert defs.ErrNoRootMaterial.code == "no-root-material"
