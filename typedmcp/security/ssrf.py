"""SSRF guard for URLs that providers fetch on a client's behalf."""

import ipaddress
import logging
import socket
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")

# Hostnames that point at the local machine or cloud metadata services
BLOCKED_HOSTNAMES = frozenset({
    "localhost",
    "localhost.localdomain",
    "metadata",
    "metadata.google.internal",
})


class SSRFError(ValueError):
    """Raised when a URL targets a scheme or address that must not be fetched."""


def is_public_address(address: str) -> bool:
    """True for globally routable unicast addresses."""
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return ip.is_global and not ip.is_multicast


def resolve_hostname(hostname: str) -> list[str]:
    """Resolve a hostname to its distinct IP addresses; empty if unresolvable."""
    try:
        infos = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC)
    except socket.gaierror:
        return []
    return sorted({info[4][0] for info in infos})


def _is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


def validate_url(url: str, resolve_dns: bool = True) -> None:
    """
    Validate a URL for SSRF safety.

    Only http(s) URLs whose host is, or resolves to, public addresses pass.

    Raises:
        SSRFError: If the URL is not safe to fetch.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise SSRFError(f"Unsupported scheme: {parsed.scheme or '(none)'}")

    hostname = parsed.hostname
    if not hostname:
        raise SSRFError("No hostname in URL")
    if hostname.lower() in BLOCKED_HOSTNAMES:
        raise SSRFError(f"Blocked hostname: {hostname}")

    if _is_ip_literal(hostname):
        addresses = [hostname]
    elif resolve_dns:
        addresses = resolve_hostname(hostname)
        if not addresses:
            raise SSRFError(f"Could not resolve hostname: {hostname}")
    else:
        return

    for address in addresses:
        if not is_public_address(address):
            logger.warning(f"SSRF blocked URL: {url} ({address})")
            raise SSRFError(f"{hostname} resolves to non-public address {address}")
