"""
Service-level exceptions.

Each error carries the HTTP status the API layer answers with. Validation
and conflict errors are ValueErrors, matching how the services signal bad
input elsewhere.
"""

import re

_URL_CREDENTIALS_RE = re.compile(r"(\w[\w+.-]*://)[^:/@\s]+(:[^@\s]*)?@")


class FightPicksError(Exception):
    """Base class for errors raised by the fight picks services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FightPicksError, ValueError):
    """Missing or malformed required fields."""

    status_code = 400


class NoPicksProvided(ValidationError):
    """A pick submission arrived without any selections."""


class AllPicksFailed(ValidationError):
    """Every selection in a pick submission failed to save."""

    def __init__(self, message: str, failed: int = 0):
        super().__init__(message)
        self.failed = failed


class NotFoundError(FightPicksError, LookupError):
    """Unknown user, league, event or league code."""

    status_code = 404


class ConflictError(FightPicksError, ValueError):
    """Duplicate membership, username, email or league code, or a delete blocked by dependents."""

    status_code = 409


class AuthenticationError(FightPicksError):
    """Unknown username or wrong password."""

    status_code = 401


class PersistenceError(FightPicksError, RuntimeError):
    """Connection or query failure."""

    status_code = 500

    @classmethod
    def from_exception(cls, exc: Exception) -> "PersistenceError":
        return cls(redact_credentials(str(exc)))


def redact_credentials(message: str) -> str:
    """Strip user:password from any connection URL embedded in a message."""
    return _URL_CREDENTIALS_RE.sub(r"\1***@", message)