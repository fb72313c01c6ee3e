from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from types import ModuleType
from typing import Any, Iterator

import pytest
from azure.core.credentials import AccessToken

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

_ENV_NAMES = {
    "STRATEGY",
    "AUTH_STRATEGY",
    "CLOUD",
    "AZURE_CLOUD",
    "TENANT_ID",
    "AZURE_TENANT_ID",
    "CLIENT_ID",
    "AZURE_CLIENT_ID",
    "CLIENT_SECRET",
    "AZURE_CLIENT_SECRET",
    "REDIRECT_URI",
    "FORCE_RECONNECT",
    "NEVER_REFRESH_TOKEN",
    "ACCESS_TOKEN",
    "AZURE_ACCESS_TOKEN",
    "ACCESS_TOKEN_EXPIRES_ON",
}


@pytest.fixture(autouse=True)
def clear_auth_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove auth settings from the environment to prevent cross-test leakage.

    Yields:
        Iterator[None]: Context manager semantics for pytest.
    """
    to_clear = [k for k in os.environ.keys() if k.upper() in _ENV_NAMES]
    for k in to_clear:
        monkeypatch.delenv(k, raising=False)
    yield


class FakeClock:
    """Settable UTC clock."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingIssuer:
    """TokenIssuer that records each request and returns numbered tokens."""

    def __init__(self, clock: FakeClock, lifetime: timedelta = timedelta(hours=1)) -> None:
        self.clock = clock
        self.lifetime = lifetime
        self.calls: list[dict[str, Any]] = []
        # ``...`` issues a fresh token; anything else is returned (or raised).
        self.result: Any = ...

    def request_token(self, **kwargs: Any) -> AccessToken | None:
        self.calls.append(dict(kwargs))
        if isinstance(self.result, Exception):
            raise self.result
        if self.result is not ...:
            return self.result
        expires = self.clock() + self.lifetime
        return AccessToken(f"token-{len(self.calls)}", int(expires.timestamp()))


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def issuer(clock: FakeClock) -> RecordingIssuer:
    return RecordingIssuer(clock)


@pytest.fixture()
def session(issuer: RecordingIssuer):
    from entradoc.azure.auth.session import AuthSession

    return AuthSession(issuer=issuer)


@pytest.fixture()
def stub_credentials(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Replace the azure-identity credential classes used by ``identity``.

    Returns:
        dict[str, Any]: Exposes recorder classes for assertion (e.g., call kwargs).
    """
    import entradoc.azure.auth.identity as identity

    class _Recorder:
        """Factory to create recorder classes that capture init kwargs."""

        def __init__(self, name: str) -> None:
            self.name = name
            self.cls = self._make(name)

        @staticmethod
        def _make(name: str):
            class _C:
                last_kwargs: dict[str, Any] | None = None
                call_count: int = 0
                get_token_calls: int = 0
                closed: list[int]

                def __init__(self, *args: Any, **kwargs: Any) -> None:
                    type(self).last_kwargs = dict(kwargs)
                    type(self).call_count += 1
                    self.instance_number = type(self).call_count

                def close(self) -> None:
                    type(self).closed.append(self.instance_number)

                def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
                    type(self).get_token_calls += 1
                    self.last_scopes = scopes
                    expires = NOW + timedelta(hours=1)
                    return AccessToken(
                        f"{name}-{self.instance_number}", int(expires.timestamp())
                    )

            _C.__name__ = _C.__qualname__ = name
            _C.closed = []
            return _C

    names = ["ClientSecretCredential", "InteractiveBrowserCredential"]
    recorders = {n: _Recorder(n) for n in names}
    for n, rec in recorders.items():
        monkeypatch.setattr(identity, n, rec.cls)

    return {n: rec.cls for n, rec in recorders.items()}


@pytest.fixture()
def identity_module(stub_credentials: dict[str, Any]) -> ModuleType:
    import entradoc.azure.auth.identity as identity

    return identity
