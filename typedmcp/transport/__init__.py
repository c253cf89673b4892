"""Transports: the message-delivery layer between peers and the server loop."""

from typedmcp.transport.base import InboundMessage, Transport, TransportClosed
from typedmcp.transport.stdio import StdioTransport
from typedmcp.transport.http import HttpTransport

__all__ = [
    "InboundMessage",
    "Transport",
    "TransportClosed",
    "StdioTransport",
    "HttpTransport",
]
