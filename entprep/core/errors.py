"""
Exception hierarchy for the entprep engine.

Remote failures are caught by the access protocol and turned into a local
fallback. Everything else propagates to the caller.
"""

from __future__ import annotations


class EntPrepError(Exception):
    """Base class for all engine errors."""


class RemoteError(EntPrepError):
    """Remote backend unreachable or answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class QuotaExhaustedError(RemoteError):
    """Backend answered 402: the third-party model quota is used up."""

    def __init__(self, message: str = "Payment required"):
        super().__init__(message, status_code=402)


class NotAuthenticatedError(EntPrepError):
    """Operation needs an active session and there is none."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class InvalidIdentityError(EntPrepError):
    """Local auth rejected an email or role that is not even plausible."""


class UnknownTrackError(EntPrepError):
    """Requested track has no section template."""


class UnknownSubjectKeyError(EntPrepError):
    """Custom questions were imported under a key no track section uses."""


class GeneratorNotFoundError(EntPrepError):
    """A template section references a subject with no registered generator."""
