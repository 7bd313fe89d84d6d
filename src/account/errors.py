"""Exceptions raised by the account client.

Only caller mistakes and a failed top-level sign-in raise. Data that could
not be fetched or parsed comes back as None / empty instead.
"""


class MassiveAccountError(Exception):
    """Base exception for the account client."""

    pass


class InvalidInputError(MassiveAccountError, ValueError):
    """Raised when a required identifier or credential is missing."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"{field} is required")


class AuthenticationError(MassiveAccountError):
    """Raised when dashboard sign-in does not yield a session."""

    pass


def require(value: str | None, field: str, message: str | None = None) -> str:
    """Return `value`, or raise InvalidInputError if it is None or empty."""
    if value is None or value == "":
        raise InvalidInputError(field, message)
    return value
