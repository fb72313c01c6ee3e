"""Connect an :class:`AuthSession` to a cloud with one acquisition strategy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from azure.core.credentials import AccessToken

from .clouds import CloudEndpointSet, resolve
from .config import AuthConfig
from .models import SessionToken, TokenRequest, utcnow
from .policy import Decision, decide
from .session import AuthSession
from .strategies import Clock, get_strategy

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)

_MESSAGES = {
    Decision.ACQUIRE: "connected",
    Decision.REUSE: "reused cached token",
    Decision.ALREADY_CONNECTED: "already connected",
    Decision.FORCED_RECONNECT: "forced reconnection",
}


@dataclass(frozen=True)
class ConnectResult:
    """Outcome of a successful :func:`connect` call."""

    token: SessionToken
    decision: Decision
    endpoints: CloudEndpointSet

    @property
    def message(self) -> str:
        return _MESSAGES[self.decision]


def connect(
    session: AuthSession,
    request: TokenRequest,
    *,
    clock: Clock | None = None,
) -> ConnectResult:
    """Make ``session`` hold a usable token for ``request.cloud``.

    The active cloud is switched before any acquisition so collaborators can
    report against the right API. The active token is replaced only when a
    strategy returns a validated token.

    Args:
        session: Session to update.
        request: One of the token request variants.
        clock: Source of the current UTC time. Defaults to the system clock.

    Returns:
        A :class:`ConnectResult` with the token now active on the session.

    Raises:
        UnknownCloudError: If the cloud is not registered.
        InvalidExternalTokenError: If an external token is missing or expired.
        AuthenticationFailedError: If the identity service returned no usable token.
    """
    now_fn = clock or utcnow
    with session.lock:
        endpoints = resolve(request.cloud)
        session.set_active_cloud(endpoints)

        now: datetime = now_fn()
        decision = decide(session.active_token, session.token_cloud, request, now)

        if not decision.acquires:
            logger.info(
                "%s: %s on %s (token valid until %s)",
                request.strategy.value,
                _MESSAGES[decision],
                endpoints.id.value,
                session.active_token.expires_on_utc.isoformat(),
            )
            return ConnectResult(session.active_token, decision, endpoints)

        if decision is Decision.FORCED_RECONNECT:
            logger.info("Forced reconnection to %s", endpoints.id.value)

        strategy = get_strategy(request, session.issuer, now_fn)
        token = strategy.acquire(request, endpoints)
        session.set_active_token(token, cloud=endpoints.id)

        logger.info(
            "Connected to %s via %s; token valid until %s",
            endpoints.id.value,
            token.acquired_via.value,
            token.expires_on_utc.isoformat(),
        )
        return ConnectResult(token, decision, endpoints)


def connect_from_config(
    session: AuthSession,
    config: AuthConfig | None = None,
    *,
    external_token: SessionToken | AccessToken | None = None,
    clock: Clock | None = None,
) -> ConnectResult:
    """Connect using :class:`AuthConfig` (read from the environment if omitted)."""
    cfg = config or AuthConfig()
    return connect(session, cfg.to_request(external_token), clock=clock)
