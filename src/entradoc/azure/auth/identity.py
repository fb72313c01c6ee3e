"""Token issuance through the azure-identity library."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from azure.core.credentials import AccessToken
from azure.identity import ClientSecretCredential, InteractiveBrowserCredential

from .scopes import authority_from_url

logger = logging.getLogger(__name__)


class TokenIssuer(Protocol):
    """Opaque token-issuing service used by the acquisition strategies."""

    def request_token(
        self,
        *,
        client_id: str,
        authority: str,
        redirect_uri: str | None,
        scopes: Sequence[str],
        tenant_id: str | None = None,
        client_secret: str | None = None,
        force_refresh: bool = True,
    ) -> AccessToken | None:
        """Return a token, or ``None`` if the service issued nothing.

        ``authority`` is tenant-qualified. When ``client_secret`` is given the
        request is a confidential-client one, otherwise it is interactive.
        """
        raise NotImplementedError


class AzureIdentityIssuer:
    """:class:`TokenIssuer` backed by azure-identity credentials.

    Each credential keeps its own in-memory token cache. ``force_refresh``
    builds a new credential, so that cache is bypassed; otherwise the
    credential from an earlier request with the same client, tenant and
    authority host is reused.
    """

    def __init__(self) -> None:
        self._credentials: dict[
            tuple[str, str, str, str], ClientSecretCredential | InteractiveBrowserCredential
        ] = {}

    def request_token(
        self,
        *,
        client_id: str,
        authority: str,
        redirect_uri: str | None,
        scopes: Sequence[str],
        tenant_id: str | None = None,
        client_secret: str | None = None,
        force_refresh: bool = True,
    ) -> AccessToken | None:
        authority_host = authority_from_url(authority)
        tenant = tenant_id or authority.rstrip("/").rsplit("/", 1)[-1]
        kind = "client_secret" if client_secret is not None else "interactive"
        key = (kind, client_id, tenant, authority_host)

        credential = None if force_refresh else self._credentials.get(key)
        if credential is None:
            credential = self._build_credential(
                kind,
                client_id=client_id,
                tenant_id=tenant,
                authority_host=authority_host,
                redirect_uri=redirect_uri,
                client_secret=client_secret,
            )
            previous = self._credentials.pop(key, None)
            if previous is not None:
                # Releases the replaced credential's MSAL client and transport.
                previous.close()
            self._credentials[key] = credential
        else:
            logger.debug("Reusing cached %s credential for tenant %s", kind, tenant)

        return credential.get_token(*scopes)

    def close(self) -> None:
        """Close every cached credential."""
        while self._credentials:
            _, credential = self._credentials.popitem()
            credential.close()

    @staticmethod
    def _build_credential(
        kind: str,
        *,
        client_id: str,
        tenant_id: str,
        authority_host: str,
        redirect_uri: str | None,
        client_secret: str | None,
    ) -> ClientSecretCredential | InteractiveBrowserCredential:
        if kind == "client_secret":
            return ClientSecretCredential(
                tenant_id=tenant_id,
                client_id=client_id,
                client_secret=client_secret,
                authority=authority_host,
            )
        return InteractiveBrowserCredential(
            tenant_id=tenant_id,
            client_id=client_id,
            authority=authority_host,
            redirect_uri=redirect_uri,
        )
