"""Typed tools and resources served over JSON-RPC (Model Context Protocol)."""

from typedmcp.mcp import Registry, Server
from typedmcp.schema import Schema, derive
from typedmcp.transport import HttpTransport, StdioTransport

__version__ = "0.1.0"

__all__ = [
    "Registry",
    "Server",
    "Schema",
    "derive",
    "HttpTransport",
    "StdioTransport",
]
