"""
Module: network.py
Description: Client network allowlist for the submission endpoint.

Form providers post from a known address range. When allowed_networks
is configured, requests from any other address are rejected with 403;
an empty list disables the check.

Dependencies: FastAPI, ipaddress, typing
Author: FormRelay Team
"""

import ipaddress
from typing import Iterable, List, Optional, Union

from fastapi import HTTPException, Request
from fastapi import status as status_codes

from formrelay.config.settings import settings
from formrelay.utils.logger import get_logger

logger = get_logger(__name__)

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def parse_networks(networks: Iterable[str]) -> List[Network]:
    """Parse CIDR strings into network objects."""
    return [ipaddress.ip_network(network, strict=False) for network in networks]


def is_address_allowed(address: Optional[str], networks: List[Network]) -> bool:
    """
    Check an address against the allowlist.

    Args:
        address: Client IP address as a string
        networks: Allowed networks; empty allows every address

    Returns:
        True if the address may submit
    """
    if not networks:
        return True
    if not address:
        return False

    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False

    # IPv4-mapped IPv6 clients are matched as IPv4
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    return any(ip.version == network.version and ip in network for network in networks)


async def require_allowed_network(request: Request) -> None:
    """
    Dependency rejecting clients outside settings.allowed_networks.

    Raises:
        HTTPException: 403 if the client address is not allowed
    """
    networks = parse_networks(settings.allowed_networks)
    client_host = request.client.host if request.client else None

    if not is_address_allowed(client_host, networks):
        logger.warning(
            "Submission rejected by network allowlist",
            client_host=client_host
        )
        raise HTTPException(
            status_code=status_codes.HTTP_403_FORBIDDEN,
            detail="Access denied: client network is not allowed"
        )
