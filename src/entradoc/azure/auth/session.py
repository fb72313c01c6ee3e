from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime

from .clouds import CloudEndpointSet, CloudId
from .errors import NotConnectedError
from .identity import AzureIdentityIssuer, TokenIssuer
from .models import SessionToken, utcnow


@dataclass(eq=False)
class AuthSession:
    """The active cloud and token of one documentation run.

    Owned by the caller's top-level context and handed to
    :func:`entradoc.azure.auth.manager.connect` and to the collaborators that
    call the API. The setters do not lock; ``connect`` holds ``lock`` for the
    whole call so concurrent connects on one session are serialized.
    """

    issuer: TokenIssuer = field(default_factory=AzureIdentityIssuer)
    active_cloud: CloudEndpointSet | None = None
    active_token: SessionToken | None = None
    token_cloud: CloudId | None = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def set_active_cloud(self, endpoints: CloudEndpointSet) -> None:
        self.active_cloud = endpoints

    def set_active_token(
        self, token: SessionToken, cloud: CloudId | None = None
    ) -> None:
        """Store a validated token and the cloud it was issued for."""
        self.active_token = token
        self.token_cloud = cloud if cloud is not None else self._cloud_id()

    def is_connected(self, now: datetime | None = None) -> bool:
        return self.active_token is not None and not self.active_token.is_expired(now)

    def get_active_token(self, now: datetime | None = None) -> SessionToken:
        """Return the current token.

        Raises:
            NotConnectedError: If no connect succeeded yet or the token expired.
        """
        if self.active_token is None:
            raise NotConnectedError("Not connected; call connect() first.")
        now = now or utcnow()
        if self.active_token.is_expired(now):
            raise NotConnectedError(
                "Session token expired at "
                f"{self.active_token.expires_on_utc.isoformat()}; reconnect."
            )
        return self.active_token

    def get_active_api_base_url(self) -> str:
        if self.active_cloud is None:
            raise NotConnectedError("No cloud selected; call connect() first.")
        return self.active_cloud.api_base_url

    def authorization_header(self, now: datetime | None = None) -> dict[str, str]:
        """Return the bearer header for an API request."""
        return {"Authorization": f"Bearer {self.get_active_token(now).token_value}"}

    def _cloud_id(self) -> CloudId | None:
        return self.active_cloud.id if self.active_cloud is not None else None
