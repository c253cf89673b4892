"""Webpage provider: read a public web page through a resource template."""

import asyncio
import logging
from urllib.parse import unquote

from typedmcp.mcp.registry import Registry
from typedmcp.security.ssrf import validate_url
from typedmcp.utils.http import fetch_text

logger = logging.getLogger(__name__)

URI_PREFIX = "webpage://"


async def read_webpage(uri: str) -> str:
    """Fetch the page whose percent-encoded URL follows the scheme."""
    target = unquote(uri.removeprefix(URI_PREFIX))
    # DNS resolution blocks
    await asyncio.to_thread(validate_url, target)
    logger.info(f"Fetching webpage: {target}")
    return await fetch_text(target)


def register(registry: Registry) -> None:
    """Register the webpage template with the registry."""
    registry.register_resource_template(
        "Webpage",
        f"{URI_PREFIX}{{url}}",
        read_webpage,
        description="load contents of a webpage by URL",
    )
