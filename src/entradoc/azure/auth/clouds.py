"""Endpoint sets for the sovereign clouds the documentation tool supports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping

from .errors import UnknownCloudError


class CloudId(str, Enum):
    """Supported clouds."""

    COMMERCIAL = "commercial"
    GOVERNMENT = "government"  # GCC
    GCC_HIGH = "gcchigh"


@dataclass(frozen=True)
class CloudEndpointSet:
    """Authority and API base URLs of one cloud.

    ``authority_url`` is not tenant-qualified; see
    :func:`entradoc.azure.auth.scopes.tenant_authority`.
    """

    id: CloudId
    authority_url: str
    api_base_url: str


# GCC tenants use the global endpoints; GCC High has its own.
CLOUD_ENDPOINTS: Final[Mapping[CloudId, CloudEndpointSet]] = MappingProxyType(
    {
        CloudId.COMMERCIAL: CloudEndpointSet(
            id=CloudId.COMMERCIAL,
            authority_url="https://login.microsoftonline.com",
            api_base_url="https://graph.microsoft.com",
        ),
        CloudId.GOVERNMENT: CloudEndpointSet(
            id=CloudId.GOVERNMENT,
            authority_url="https://login.microsoftonline.com",
            api_base_url="https://graph.microsoft.com",
        ),
        CloudId.GCC_HIGH: CloudEndpointSet(
            id=CloudId.GCC_HIGH,
            authority_url="https://login.microsoftonline.us",
            api_base_url="https://graph.microsoft.us",
        ),
    }
)


def parse_cloud_id(cloud_id: CloudId | str) -> CloudId:
    """Return the :class:`CloudId` for an enum member or its (case-insensitive) value.

    Raises:
        UnknownCloudError: If ``cloud_id`` names no supported cloud.
    """
    if isinstance(cloud_id, CloudId):
        return cloud_id
    if isinstance(cloud_id, str):
        try:
            return CloudId(cloud_id.strip().lower())
        except ValueError:
            pass
    raise UnknownCloudError(cloud_id)


def resolve(cloud_id: CloudId | str) -> CloudEndpointSet:
    """Return the endpoint set for ``cloud_id``.

    Args:
        cloud_id: A :class:`CloudId` or its string value (e.g. ``"GCCHigh"``).

    Returns:
        The registered :class:`CloudEndpointSet`.

    Raises:
        UnknownCloudError: If the cloud is not registered. There is no
            fallback to the commercial cloud.
    """
    cid = parse_cloud_id(cloud_id)
    try:
        return CLOUD_ENDPOINTS[cid]
    except KeyError:
        raise UnknownCloudError(cloud_id) from None
