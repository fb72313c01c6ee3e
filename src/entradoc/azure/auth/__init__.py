"""Authentication session for Microsoft Graph documentation runs.

Public API:
- AuthSession (active cloud + token, read by API collaborators)
- connect(), connect_from_config() → ConnectResult
- ExternalTokenRequest, ClientSecretRequest, InteractiveBrowserRequest (strategies)
- request_from_parameters() (connect parameter groups → request)
- AuthConfig (settings)
- CloudId, resolve() (sovereign cloud endpoints)
- SessionToken, Strategy
- error types from ``errors``
"""

from .clouds import CLOUD_ENDPOINTS, CloudEndpointSet, CloudId, resolve
from .config import AuthConfig
from .errors import (
    AuthenticationFailedError,
    AuthSessionError,
    InvalidExternalTokenError,
    NotConnectedError,
    UnknownCloudError,
)
from .manager import ConnectResult, connect, connect_from_config
from .models import (
    ClientSecretRequest,
    ExternalTokenRequest,
    InteractiveBrowserRequest,
    SessionToken,
    Strategy,
    TokenRequest,
)
from .parameters import request_from_parameters
from .policy import Decision
from .session import AuthSession

__all__ = [
    "AuthConfig",
    "AuthSession",
    "AuthSessionError",
    "AuthenticationFailedError",
    "CLOUD_ENDPOINTS",
    "ClientSecretRequest",
    "CloudEndpointSet",
    "CloudId",
    "ConnectResult",
    "Decision",
    "ExternalTokenRequest",
    "InteractiveBrowserRequest",
    "InvalidExternalTokenError",
    "NotConnectedError",
    "SessionToken",
    "Strategy",
    "TokenRequest",
    "UnknownCloudError",
    "connect",
    "connect_from_config",
    "request_from_parameters",
    "resolve",
]
