from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Final, Literal, Union

from azure.core.credentials import AccessToken
from pydantic import BaseModel, ConfigDict, Field, InstanceOf, SecretStr, field_validator

from .clouds import CloudId, parse_cloud_id

# Microsoft Graph Command Line Tools, a multi-tenant public client.
PUBLIC_CLIENT_ID: Final[str] = "14d82eec-204b-4c2f-b7e8-296a70dab67e"
LOOPBACK_REDIRECT_URI: Final[str] = "http://localhost:8400"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Strategy(str, Enum):
    """Supported token acquisition strategies."""

    EXTERNAL_TOKEN = "external_token"
    CLIENT_SECRET = "client_secret"
    INTERACTIVE_BROWSER = "interactive_browser"


@dataclass(frozen=True)
class SessionToken:
    """An acquired access token.

    Instances are immutable; a refresh yields a new ``SessionToken``.
    Naive ``expires_on_utc`` values are taken to be UTC.
    """

    token_value: str = field(repr=False)
    expires_on_utc: datetime
    acquired_via: Strategy

    def __post_init__(self) -> None:
        if self.expires_on_utc.tzinfo is None:
            object.__setattr__(
                self, "expires_on_utc", self.expires_on_utc.replace(tzinfo=timezone.utc)
            )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True once ``now`` has reached the expiry instant."""
        return self.expires_on_utc <= (now or utcnow())

    @classmethod
    def from_access_token(
        cls, access_token: AccessToken, acquired_via: Strategy
    ) -> "SessionToken":
        """Build a token from an azure-core :class:`AccessToken` (epoch seconds)."""
        return cls(
            token_value=access_token.token,
            expires_on_utc=datetime.fromtimestamp(
                access_token.expires_on, tz=timezone.utc
            ),
            acquired_via=acquired_via,
        )


class _TokenRequestBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    cloud: CloudId = CloudId.COMMERCIAL

    @field_validator("cloud", mode="before")
    @classmethod
    def _parse_cloud(cls, v: object) -> CloudId:
        # Raises UnknownCloudError, which pydantic passes through unwrapped.
        return parse_cloud_id(v)


class ExternalTokenRequest(_TokenRequestBase):
    """Use a token the caller already holds; no identity service call."""

    strategy: Literal[Strategy.EXTERNAL_TOKEN] = Strategy.EXTERNAL_TOKEN
    # Validated (missing / expired) at connect time, not here.
    token: Union[InstanceOf[SessionToken], InstanceOf[AccessToken], None] = None

    @property
    def force_refresh(self) -> bool:
        return True


class ClientSecretRequest(_TokenRequestBase):
    """Silent confidential-client acquisition with a client secret."""

    strategy: Literal[Strategy.CLIENT_SECRET] = Strategy.CLIENT_SECRET
    tenant_id: str = Field(min_length=1)
    client_id: str = Field(min_length=1)
    client_secret: SecretStr
    redirect_uri: str | None = None
    never_refresh_token: bool = False

    @field_validator("client_secret")
    @classmethod
    def _secret_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("client_secret must not be empty")
        return v

    @property
    def force_refresh(self) -> bool:
        return not self.never_refresh_token


class InteractiveBrowserRequest(_TokenRequestBase):
    """Delegated acquisition through a browser sign-in against ``common``."""

    strategy: Literal[Strategy.INTERACTIVE_BROWSER] = Strategy.INTERACTIVE_BROWSER
    client_id: str = Field(default=PUBLIC_CLIENT_ID, min_length=1)
    redirect_uri: str = Field(default=LOOPBACK_REDIRECT_URI, min_length=1)
    force_reconnect: bool = False

    @property
    def force_refresh(self) -> bool:
        return self.force_reconnect


TokenRequest = Annotated[
    Union[ExternalTokenRequest, ClientSecretRequest, InteractiveBrowserRequest],
    Field(discriminator="strategy"),
]
