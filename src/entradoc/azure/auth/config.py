from __future__ import annotations

from datetime import datetime

from azure.core.credentials import AccessToken
from pydantic import AliasChoices, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .clouds import CloudId, parse_cloud_id
from .models import (
    LOOPBACK_REDIRECT_URI,
    PUBLIC_CLIENT_ID,
    ClientSecretRequest,
    ExternalTokenRequest,
    InteractiveBrowserRequest,
    SessionToken,
    Strategy,
    TokenRequest,
)


class AuthConfig(BaseSettings):
    """Configuration for connecting a documentation session.

    Values are read from the environment automatically and cross-checked
    against the selected :class:`Strategy`.

    Environment variables (aliases supported where noted):
        - AUTH_STRATEGY (alias: STRATEGY)
        - AZURE_CLOUD (alias: CLOUD)
        - AZURE_TENANT_ID (alias: TENANT_ID)
        - AZURE_CLIENT_ID (alias: CLIENT_ID)
        - AZURE_CLIENT_SECRET (alias: CLIENT_SECRET)
        - REDIRECT_URI
        - FORCE_RECONNECT
        - NEVER_REFRESH_TOKEN
        - AZURE_ACCESS_TOKEN (alias: ACCESS_TOKEN)
        - ACCESS_TOKEN_EXPIRES_ON
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # validation_alias replaces the field name as an input key, so the field
    # name is repeated in each AliasChoices.

    strategy: Strategy = Field(
        default=Strategy.INTERACTIVE_BROWSER,
        validation_alias=AliasChoices("strategy", "AUTH_STRATEGY", "STRATEGY"),
    )
    cloud: CloudId = Field(
        default=CloudId.COMMERCIAL,
        validation_alias=AliasChoices("cloud", "AZURE_CLOUD", "CLOUD"),
    )
    tenant_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("tenant_id", "AZURE_TENANT_ID", "TENANT_ID"),
    )
    client_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("client_id", "AZURE_CLIENT_ID", "CLIENT_ID"),
    )
    client_secret: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "client_secret", "AZURE_CLIENT_SECRET", "CLIENT_SECRET"
        ),
    )
    redirect_uri: str = Field(
        default=LOOPBACK_REDIRECT_URI,
        validation_alias=AliasChoices("redirect_uri", "REDIRECT_URI"),
    )
    force_reconnect: bool = Field(
        default=False,
        validation_alias=AliasChoices("force_reconnect", "FORCE_RECONNECT"),
    )
    never_refresh_token: bool = Field(
        default=False,
        validation_alias=AliasChoices("never_refresh_token", "NEVER_REFRESH_TOKEN"),
    )
    access_token: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "access_token", "AZURE_ACCESS_TOKEN", "ACCESS_TOKEN"
        ),
    )
    access_token_expires_on: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "access_token_expires_on", "ACCESS_TOKEN_EXPIRES_ON"
        ),
    )

    @field_validator("cloud", mode="before")
    @classmethod
    def _parse_cloud(cls, v: object) -> CloudId:
        """Accept cloud names in any case (e.g. ``GCCHigh``); reject unknown ones."""
        return parse_cloud_id(v)

    @model_validator(mode="after")
    def _cross_field_validation(self) -> "AuthConfig":
        """Validate required fields for the selected strategy."""
        s = self.strategy
        if s is Strategy.CLIENT_SECRET:
            if not (self.tenant_id and self.client_id and self.client_secret):
                raise ValueError(
                    "client_secret requires tenant_id, client_id, and client_secret."
                )
        elif s is Strategy.EXTERNAL_TOKEN:
            if self.access_token and self.access_token_expires_on is None:
                raise ValueError(
                    "external_token requires access_token_expires_on when access_token is set."
                )
        # INTERACTIVE_BROWSER falls back to the public client id.
        return self

    def to_request(
        self, external_token: SessionToken | AccessToken | None = None
    ) -> TokenRequest:
        """Build the token request variant for the configured strategy.

        Args:
            external_token: Token handed in by the host process. Only used by
                the external token strategy; takes precedence over
                ``access_token`` from the environment.
        """
        match self.strategy:
            case Strategy.EXTERNAL_TOKEN:
                token = external_token
                if token is None and self.access_token is not None:
                    token = SessionToken(
                        token_value=self.access_token.get_secret_value(),
                        expires_on_utc=self.access_token_expires_on,
                        acquired_via=Strategy.EXTERNAL_TOKEN,
                    )
                return ExternalTokenRequest(cloud=self.cloud, token=token)
            case Strategy.CLIENT_SECRET:
                return ClientSecretRequest(
                    cloud=self.cloud,
                    tenant_id=self.tenant_id,
                    client_id=self.client_id,
                    client_secret=self.client_secret,
                    redirect_uri=self.redirect_uri,
                    never_refresh_token=self.never_refresh_token,
                )
            case _:
                return InteractiveBrowserRequest(
                    cloud=self.cloud,
                    client_id=self.client_id or PUBLIC_CLIENT_ID,
                    redirect_uri=self.redirect_uri,
                    force_reconnect=self.force_reconnect,
                )
