"""CredentialsError — base exception class and the credential error taxonomy."""

from __future__ import annotations


class CredentialsError(Exception):
    """Base error for all credential operations.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code string.
    """

    def __init__(self, message: str, *, code: str = "credentials-error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(CredentialsError):
    """Required key material is missing or cannot be decoded."""

    def __init__(self, message: str, *, code: str = "validation-error") -> None:
        super().__init__(message, code=code)


class StateError(CredentialsError):
    """Key material contradicts the credential's current state."""

    def __init__(self, message: str, *, code: str = "state-error") -> None:
        super().__init__(message, code=code)


class FormatError(CredentialsError):
    """Compact-form input cannot be parsed or has the wrong shape."""

    def __init__(self, message: str, *, code: str = "format-error") -> None:
        super().__init__(message, code=code)
