from typing import Final
from urllib.parse import urlparse

COMMON_TENANT: Final[str] = "common"


def authority_from_url(url: str) -> str:
    """Return the URL authority (scheme + host).

    Args:
        url: Absolute URL (e.g., "https://login.microsoftonline.us/<tenant>").

    Returns:
        The "<scheme>://<host>" portion of the URL.

    Raises:
        ValueError: If ``url`` is not absolute or lacks a host.
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("url must be an absolute URL")
    return f"{parsed.scheme}://{parsed.netloc}"


def tenant_authority(authority_url: str, tenant_id: str) -> str:
    """Qualify a cloud authority URL with a tenant (or ``common``)."""
    if not tenant_id:
        raise ValueError("tenant_id must not be empty")
    return f"{authority_from_url(authority_url)}/{tenant_id}"


def default_scope_from_url(api_base_url: str) -> str:
    return f"{authority_from_url(api_base_url)}/.default"
