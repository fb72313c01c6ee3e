from __future__ import annotations

import logging
from datetime import timedelta
from typing import get_type_hints

import pytest
from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError

from entradoc.azure.auth.clouds import CloudId, resolve
from entradoc.azure.auth.errors import (
    AuthenticationFailedError,
    InvalidExternalTokenError,
)
from entradoc.azure.auth.models import (
    PUBLIC_CLIENT_ID,
    ClientSecretRequest,
    ExternalTokenRequest,
    InteractiveBrowserRequest,
    SessionToken,
    Strategy,
)
from entradoc.azure.auth.strategies import (
    AcquisitionStrategy,
    ClientSecretStrategy,
    ExternalTokenStrategy,
    InteractiveBrowserStrategy,
    get_strategy,
)

GCC_HIGH = resolve(CloudId.GCC_HIGH)
COMMERCIAL = resolve(CloudId.COMMERCIAL)


def _secret_request(**overrides) -> ClientSecretRequest:
    fields = {"tenant_id": "t", "client_id": "c", "client_secret": "sekrit"}
    fields.update(overrides)
    return ClientSecretRequest(**fields)


def test_get_strategy__matches_request_variant(issuer) -> None:
    assert isinstance(get_strategy(ExternalTokenRequest(), issuer), ExternalTokenStrategy)
    assert isinstance(get_strategy(_secret_request(), issuer), ClientSecretStrategy)
    assert isinstance(
        get_strategy(InteractiveBrowserRequest(), issuer), InteractiveBrowserStrategy
    )


def test_get_strategy__unknown_request_raises(issuer) -> None:
    with pytest.raises(TypeError, match="Unsupported token request"):
        get_strategy(object(), issuer)  # type: ignore[arg-type]


def test_external__missing_token(clock) -> None:
    with pytest.raises(InvalidExternalTokenError) as exc_info:
        ExternalTokenStrategy(clock).acquire(ExternalTokenRequest(), COMMERCIAL)
    assert exc_info.value.reason == "missing"


def test_external__expired_and_boundary_token(clock) -> None:
    strategy = ExternalTokenStrategy(clock)
    for expires in (clock.now - timedelta(minutes=5), clock.now):
        token = SessionToken("x", expires, Strategy.EXTERNAL_TOKEN)
        with pytest.raises(InvalidExternalTokenError) as exc_info:
            strategy.acquire(ExternalTokenRequest(token=token), COMMERCIAL)
        assert exc_info.value.reason == "expired"


def test_external__valid_session_token_returned_as_is(clock) -> None:
    token = SessionToken("x", clock.now + timedelta(seconds=1), Strategy.EXTERNAL_TOKEN)
    result = ExternalTokenStrategy(clock).acquire(
        ExternalTokenRequest(token=token), COMMERCIAL
    )
    assert result is token


def test_external__access_token_converted(clock) -> None:
    expires = clock.now + timedelta(hours=1)
    result = ExternalTokenStrategy(clock).acquire(
        ExternalTokenRequest(token=AccessToken("raw", int(expires.timestamp()))),
        COMMERCIAL,
    )
    assert result.token_value == "raw"
    assert result.expires_on_utc == expires
    assert result.acquired_via is Strategy.EXTERNAL_TOKEN


def test_client_secret__request_arguments(issuer, clock) -> None:
    token = ClientSecretStrategy(issuer, clock).acquire(_secret_request(), GCC_HIGH)

    assert issuer.calls == [
        {
            "client_id": "c",
            "authority": "https://login.microsoftonline.us/t",
            "redirect_uri": None,
            "scopes": ["https://graph.microsoft.us/.default"],
            "tenant_id": "t",
            "client_secret": "sekrit",
            "force_refresh": True,
        }
    ]
    assert token.token_value == "token-1"
    assert token.acquired_via is Strategy.CLIENT_SECRET


def test_client_secret__never_refresh_disables_force_refresh(issuer, clock) -> None:
    ClientSecretStrategy(issuer, clock).acquire(
        _secret_request(never_refresh_token=True), COMMERCIAL
    )
    assert issuer.calls[0]["force_refresh"] is False


@pytest.mark.parametrize("lifetime", [timedelta(0), timedelta(seconds=-30)])
def test_client_secret__expired_result_fails(issuer, clock, lifetime) -> None:
    issuer.lifetime = lifetime
    with pytest.raises(AuthenticationFailedError, match="expired"):
        ClientSecretStrategy(issuer, clock).acquire(_secret_request(), COMMERCIAL)


@pytest.mark.parametrize("result", [None, AccessToken("", 4_000_000_000)])
def test_client_secret__no_token_fails(issuer, clock, result) -> None:
    issuer.result = result
    with pytest.raises(AuthenticationFailedError, match="no token"):
        ClientSecretStrategy(issuer, clock).acquire(_secret_request(), COMMERCIAL)


def test_client_secret__library_error_is_wrapped(issuer, clock) -> None:
    cause = ClientAuthenticationError(message="AADSTS7000215: Invalid client secret")
    issuer.result = cause
    with pytest.raises(AuthenticationFailedError) as exc_info:
        ClientSecretStrategy(issuer, clock).acquire(_secret_request(), COMMERCIAL)
    assert exc_info.value.__cause__ is cause
    assert len(issuer.calls) == 1


def test_interactive__common_authority_and_public_client(issuer, clock) -> None:
    token = InteractiveBrowserStrategy(issuer, clock).acquire(
        InteractiveBrowserRequest(cloud=CloudId.GCC_HIGH), GCC_HIGH
    )

    call = issuer.calls[0]
    assert call["client_id"] == PUBLIC_CLIENT_ID
    assert call["authority"] == "https://login.microsoftonline.us/common"
    assert call["tenant_id"] == "common"
    assert call["redirect_uri"] == "http://localhost:8400"
    assert call["scopes"] == ["https://graph.microsoft.us/.default"]
    assert "client_secret" not in call
    assert call["force_refresh"] is False
    assert token.acquired_via is Strategy.INTERACTIVE_BROWSER


@pytest.mark.parametrize(
    "result, message",
    [(None, "returned no token"), (AccessToken("t", 0), "expired at")],
)
def test_client_secret__unusable_result_logs_warning(
    issuer, clock, caplog: pytest.LogCaptureFixture, result, message
) -> None:
    issuer.result = result
    with caplog.at_level(logging.WARNING, logger="entradoc.azure.auth.strategies"):
        with pytest.raises(AuthenticationFailedError):
            ClientSecretStrategy(issuer, clock).acquire(_secret_request(), COMMERCIAL)

    assert [r.levelno for r in caplog.records] == [logging.WARNING]
    assert message in caplog.text
    assert "sekrit" not in caplog.text


def test_acquisition_strategy__request_typed_as_token_request() -> None:
    hints = get_type_hints(AcquisitionStrategy.acquire)
    assert hints["request"] == get_type_hints(get_strategy)["request"]
