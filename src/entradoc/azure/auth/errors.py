"""Errors raised while connecting an authentication session."""

from __future__ import annotations


class AuthSessionError(Exception):
    """Base class for session authentication errors."""


class UnknownCloudError(AuthSessionError, LookupError):
    """Raised when a cloud identifier has no endpoint set."""

    def __init__(self, cloud_id: object) -> None:
        self.cloud_id = cloud_id
        super().__init__(f"Unsupported cloud: {cloud_id!r}")


class InvalidExternalTokenError(AuthSessionError, ValueError):
    """Raised when a caller-supplied token is missing or expired.

    Attributes:
        reason: ``"missing"`` or ``"expired"``.
    """

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class AuthenticationFailedError(AuthSessionError):
    """Raised when the identity service returns no usable token."""


class NotConnectedError(AuthSessionError, RuntimeError):
    """Raised when a token is requested before a successful connect."""
