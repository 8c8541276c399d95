"""Exceptions raised by Bulletin."""

from typing import Optional


class BulletinError(Exception):
    """Base exception for all Bulletin errors."""


class TransportError(BulletinError):
    """
    Raised when a request to the content API fails.

    Wraps both connection failures and non-2xx responses. The original
    httpx exception is kept on ``original`` and as ``__cause__``.
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 original: Optional[Exception] = None):
        super().__init__(message)
        self.status_code = status_code
        self.original = original


class UploadError(TransportError):
    """Raised when an editor resource upload fails or returns a malformed body."""


class ResourceConsumedError(BulletinError):
    """Raised when a resource reference is inserted into a document twice."""
