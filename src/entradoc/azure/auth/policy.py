"""Decide whether a connect call reuses the session token or acquires a new one."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from .clouds import CloudId
from .models import InteractiveBrowserRequest, SessionToken, TokenRequest


class Decision(str, Enum):
    ACQUIRE = "acquire"
    REUSE = "reuse"
    ALREADY_CONNECTED = "already_connected"
    FORCED_RECONNECT = "forced_reconnect"

    @property
    def acquires(self) -> bool:
        return self in (Decision.ACQUIRE, Decision.FORCED_RECONNECT)


def decide(
    token: SessionToken | None,
    token_cloud: CloudId | None,
    request: TokenRequest,
    now: datetime,
) -> Decision:
    """Apply the refresh policy to the current session token.

    Args:
        token: The session's active token, if any.
        token_cloud: Cloud the active token was issued for.
        request: The incoming token request.
        now: Current UTC time. A token expiring exactly at ``now`` is expired.

    Returns:
        The :class:`Decision` for this connect call.
    """
    if token is None or token.is_expired(now) or token_cloud != request.cloud:
        return Decision.ACQUIRE

    if isinstance(request, InteractiveBrowserRequest):
        if request.force_reconnect:
            return Decision.FORCED_RECONNECT
        return Decision.ALREADY_CONNECTED

    if not request.force_refresh:
        return Decision.REUSE
    return Decision.ACQUIRE
