"""Per-client rate limiting for the job and notification routes.

Clients are keyed by IP. Behind a proxy the X-Forwarded-For chain is walked
from the right, skipping hops that belong to ``Settings.trusted_proxy_cidrs``;
the first hop outside that set is the client. Entries further left are
client-supplied and never trusted.
"""

import ipaddress
from functools import lru_cache

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import get_settings
from .logging_config import get_logger

logger = get_logger("rate_limit")

Network = ipaddress.IPv4Network | ipaddress.IPv6Network


@lru_cache
def trusted_networks(cidrs: tuple[str, ...]) -> tuple[Network, ...]:
    networks = []
    for cidr in cidrs:
        try:
            networks.append(ipaddress.ip_network(cidr, strict=False))
        except ValueError:
            logger.warning(f"Ignoring invalid trusted proxy CIDR: {cidr!r}")
    return tuple(networks)


def _is_trusted(address, networks: tuple[Network, ...]) -> bool:
    return any(address in network for network in networks)


def _parse(ip_str: str):
    try:
        return ipaddress.ip_address(ip_str)
    except ValueError:
        return None


def resolve_client_ip(request, networks: tuple[Network, ...]) -> str:
    """The address of the nearest hop that is not a trusted proxy."""
    peer = get_remote_address(request)
    address = _parse(peer)
    if address is None or not _is_trusted(address, networks):
        return peer

    forwarded = request.headers.get("x-forwarded-for") or ""
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]

    client = peer
    for hop in reversed(hops):
        address = _parse(hop)
        if address is None:
            # Garbage in the chain; stop at the last hop we could read
            break
        client = hop
        if not _is_trusted(address, networks):
            break
    return client


def get_client_ip(request) -> str:
    settings = get_settings()
    return resolve_client_ip(request, trusted_networks(tuple(settings.trusted_proxy_cidrs)))


limiter = Limiter(key_func=get_client_ip)
