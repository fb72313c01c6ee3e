from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Protocol

from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError

from .clouds import CloudEndpointSet
from .errors import AuthenticationFailedError, InvalidExternalTokenError
from .identity import TokenIssuer
from .models import (
    ClientSecretRequest,
    ExternalTokenRequest,
    InteractiveBrowserRequest,
    SessionToken,
    Strategy,
    TokenRequest,
    utcnow,
)
from .scopes import COMMON_TENANT, default_scope_from_url, tenant_authority

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class AcquisitionStrategy(Protocol):
    """Produces a :class:`SessionToken` for one request variant."""

    def acquire(
        self, request: TokenRequest, endpoints: CloudEndpointSet
    ) -> SessionToken:
        raise NotImplementedError


class ExternalTokenStrategy:
    """Accept a caller-supplied token after checking it is present and unexpired."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock

    def acquire(
        self, request: ExternalTokenRequest, endpoints: CloudEndpointSet
    ) -> SessionToken:
        supplied = request.token
        if supplied is None:
            logger.warning("Rejected external token: no token supplied")
            raise InvalidExternalTokenError(
                "missing", "No external token was supplied."
            )

        if isinstance(supplied, AccessToken):
            token = SessionToken.from_access_token(supplied, Strategy.EXTERNAL_TOKEN)
        else:
            token = supplied

        now = self._clock()
        if token.is_expired(now):
            logger.warning(
                "Rejected external token: expired at %s",
                token.expires_on_utc.isoformat(),
            )
            raise InvalidExternalTokenError(
                "expired",
                f"External token expired at {token.expires_on_utc.isoformat()} "
                f"(now {now.isoformat()}).",
            )
        return token


class _IssuerStrategy:
    """Shared issuer call and result validation for network strategies."""

    strategy: Strategy

    def __init__(self, issuer: TokenIssuer, clock: Clock = utcnow) -> None:
        self._issuer = issuer
        self._clock = clock

    def _request(self, **kwargs) -> SessionToken:
        try:
            result = self._issuer.request_token(**kwargs)
        except ClientAuthenticationError as exc:
            logger.warning("%s token request failed: %s", self.strategy.value, exc)
            raise AuthenticationFailedError(
                f"{self.strategy.value} authentication failed: {exc}"
            ) from exc

        if result is None or not result.token:
            logger.warning("%s token request returned no token", self.strategy.value)
            raise AuthenticationFailedError(
                f"{self.strategy.value} authentication returned no token."
            )

        token = SessionToken.from_access_token(result, self.strategy)
        if token.is_expired(self._clock()):
            logger.warning(
                "%s token request returned a token that expired at %s",
                self.strategy.value,
                token.expires_on_utc.isoformat(),
            )
            raise AuthenticationFailedError(
                f"{self.strategy.value} authentication returned a token that "
                f"expired at {token.expires_on_utc.isoformat()}."
            )
        return token


class ClientSecretStrategy(_IssuerStrategy):
    """Non-interactive confidential-client acquisition."""

    strategy = Strategy.CLIENT_SECRET

    def acquire(
        self, request: ClientSecretRequest, endpoints: CloudEndpointSet
    ) -> SessionToken:
        return self._request(
            client_id=request.client_id,
            authority=tenant_authority(endpoints.authority_url, request.tenant_id),
            redirect_uri=request.redirect_uri,
            scopes=[default_scope_from_url(endpoints.api_base_url)],
            tenant_id=request.tenant_id,
            client_secret=request.client_secret.get_secret_value(),
            force_refresh=request.force_refresh,
        )


class InteractiveBrowserStrategy(_IssuerStrategy):
    """Delegated acquisition through the browser; may block on the user."""

    strategy = Strategy.INTERACTIVE_BROWSER

    def acquire(
        self, request: InteractiveBrowserRequest, endpoints: CloudEndpointSet
    ) -> SessionToken:
        return self._request(
            client_id=request.client_id,
            authority=tenant_authority(endpoints.authority_url, COMMON_TENANT),
            redirect_uri=request.redirect_uri,
            scopes=[default_scope_from_url(endpoints.api_base_url)],
            tenant_id=COMMON_TENANT,
            force_refresh=request.force_refresh,
        )


def get_strategy(
    request: TokenRequest, issuer: TokenIssuer, clock: Clock = utcnow
) -> AcquisitionStrategy:
    """Return the strategy that handles ``request``.

    Args:
        request: The token request variant.
        issuer: Identity service used by the network strategies.
        clock: Source of the current UTC time for expiry checks.

    Returns:
        A concrete :class:`AcquisitionStrategy`.
    """
    match request:
        case ExternalTokenRequest():
            return ExternalTokenStrategy(clock)
        case ClientSecretRequest():
            return ClientSecretStrategy(issuer, clock)
        case InteractiveBrowserRequest():
            return InteractiveBrowserStrategy(issuer, clock)
        case _:
            raise TypeError(f"Unsupported token request: {type(request).__name__}")
