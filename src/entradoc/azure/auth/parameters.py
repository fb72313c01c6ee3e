"""Translate connect parameters into exactly one token request variant."""

from __future__ import annotations

from azure.core.credentials import AccessToken

from .clouds import CloudId
from .models import (
    PUBLIC_CLIENT_ID,
    ClientSecretRequest,
    ExternalTokenRequest,
    InteractiveBrowserRequest,
    SessionToken,
    TokenRequest,
)


def request_from_parameters(
    *,
    token: SessionToken | AccessToken | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
    tenant_id: str | None = None,
    interactive: bool | None = None,
    cloud: CloudId | str = CloudId.COMMERCIAL,
    force_reconnect: bool = False,
    never_refresh_token: bool = False,
) -> TokenRequest:
    """Pick the request variant from mutually exclusive parameter groups.

    Args:
        token: Token already held by the caller (external token group).
        client_id: Application id. Confidential client group, or an override
            of the public client id for interactive sign-in.
        client_secret: Client secret (confidential client group).
        tenant_id: Tenant id (confidential client group).
        interactive: Request interactive sign-in explicitly.
        cloud: Cloud to connect to.
        force_reconnect: Re-prompt even when already connected (interactive).
        never_refresh_token: Allow reuse of a cached token (confidential client).

    Raises:
        ValueError: If parameters of different groups are mixed or a group is
            incomplete.
    """
    confidential = client_secret is not None or tenant_id is not None
    groups = [
        name
        for name, used in (
            ("token", token is not None),
            ("client_secret", confidential),
            ("interactive", bool(interactive)),
        )
        if used
    ]
    if len(groups) > 1:
        raise ValueError(
            f"Parameters for {', '.join(groups)} cannot be combined; choose one strategy."
        )

    # 1) Token supplied by the caller
    if token is not None:
        return ExternalTokenRequest(cloud=cloud, token=token)

    # 2) Client secret (requires tenant)
    if confidential:
        if not (client_id and client_secret and tenant_id):
            raise ValueError(
                "client_secret requires tenant_id, client_id, and client_secret."
            )
        return ClientSecretRequest(
            cloud=cloud,
            tenant_id=tenant_id,
            client_id=client_id,
            client_secret=client_secret,
            never_refresh_token=never_refresh_token,
        )

    # 3) Interactive sign-in, also the default
    return InteractiveBrowserRequest(
        cloud=cloud,
        client_id=client_id or PUBLIC_CLIENT_ID,
        force_reconnect=force_reconnect,
    )
