"""
Exception hierarchy shared by the session, content and bridge layers.

Storage and normalization errors are contained where they occur; session and
transport errors travel to the UI as failure events named after the class.
"""

from __future__ import annotations


class SavedExplorerError(Exception):
    """Base class for all errors raised by the explorer core."""

    @property
    def reason(self) -> str:
        """Stable identifier sent to the UI in failure events."""
        return type(self).__name__


class StorageError(SavedExplorerError):
    """Raised when the key-value store cannot read or write a value."""


class StateMismatchError(SavedExplorerError):
    """Raised when the OAuth callback state does not match the stored nonce."""


class ExchangeError(SavedExplorerError):
    """Raised when the provider rejects an authorization grant."""


class NotAuthenticatedError(SavedExplorerError):
    """Raised when an authenticated client is requested without a session."""


class TransportError(SavedExplorerError):
    """Raised on network or HTTP-level failures while talking to the API."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class AuthRejectedError(TransportError):
    """Raised when the API rejects the access token (expired or revoked)."""


class MalformedItemError(SavedExplorerError):
    """Raised when a saved item lacks a field required for normalization."""


__all__ = [
    "AuthRejectedError",
    "ExchangeError",
    "MalformedItemError",
    "NotAuthenticatedError",
    "SavedExplorerError",
    "StateMismatchError",
    "StorageError",
    "TransportError",
]
