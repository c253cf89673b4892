"""Outbound HTTP client with retry, timeout handling, and connection pooling."""

import asyncio
import logging

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from typedmcp.config.loader import get_settings

logger = logging.getLogger(__name__)

_shared_client: httpx.AsyncClient | None = None
_client_lock = asyncio.Lock()


async def get_shared_client() -> httpx.AsyncClient:
    """Get a shared HTTP client with connection pooling."""
    global _shared_client

    if _shared_client is None or _shared_client.is_closed:
        async with _client_lock:
            # Double-check after acquiring lock
            if _shared_client is None or _shared_client.is_closed:
                settings = get_settings()
                _shared_client = httpx.AsyncClient(
                    timeout=httpx.Timeout(settings.fetch_timeout),
                    # Redirect targets would bypass the SSRF check
                    follow_redirects=False,
                    headers={
                        "User-Agent": f"{settings.server_name}/{settings.server_version}",
                    },
                    limits=httpx.Limits(
                        max_keepalive_connections=10,
                        max_connections=20,
                        keepalive_expiry=30.0,
                    ),
                )
                logger.debug("Created shared HTTP client")

    return _shared_client


async def close_shared_client() -> None:
    """Close the shared HTTP client (call on shutdown)."""
    global _shared_client
    if _shared_client is not None:
        await _shared_client.aclose()
        _shared_client = None
        logger.debug("Closed shared HTTP client")


# Transient network failures only; HTTP error statuses are returned to the caller
http_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
    reraise=True,
)


@http_retry
async def fetch_text(url: str, timeout: float | None = None) -> str:
    """
    Fetch a URL and return its body as text.

    Raises:
        httpx.HTTPStatusError: On HTTP error status.
        httpx.TimeoutException: On timeout after retries.
    """
    client = await get_shared_client()
    if timeout:
        response = await client.get(url, timeout=timeout)
    else:
        response = await client.get(url)
    response.raise_for_status()
    return response.text
