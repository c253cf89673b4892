"""Pytest configuration and fixtures."""

import asyncio
import contextlib
import json
from dataclasses import dataclass
from typing import Any

import pytest

from typedmcp.config.loader import Settings
from typedmcp.mcp.registry import Registry
from typedmcp.mcp.server import Server
from typedmcp.transport.base import InboundMessage, Transport, TransportClosed

RESPONSE_TIMEOUT = 5.0


@dataclass
class EchoMessage:
    Msg: str


@dataclass
class ResourceValue:
    ID: int


async def echo(req: EchoMessage) -> EchoMessage:
    return req


async def read_res(uri: str) -> ResourceValue:
    parts = uri.split("res://")
    if len(parts) != 2:
        raise ValueError("bad uri")
    return ResourceValue(ID=int(parts[1]))


class MemoryTransport(Transport):
    """In-process transport: tests push raw messages and pop raw replies."""

    def __init__(self) -> None:
        self.inbound: asyncio.Queue[bytes | None] = asyncio.Queue()
        self.outbound: asyncio.Queue[str] = asyncio.Queue()
        self.notifications_acked = 0

    async def receive(self) -> InboundMessage:
        payload = await self.inbound.get()
        if payload is None:
            raise TransportClosed("closed")
        return InboundMessage(payload=payload)

    async def send(self, message: InboundMessage, response: str | None) -> None:
        if response is None:
            self.notifications_acked += 1
            return
        await self.outbound.put(response)

    async def close(self) -> None:
        await self.inbound.put(None)

    async def push(self, message: Any) -> None:
        raw = message if isinstance(message, (bytes, str)) else json.dumps(message)
        await self.inbound.put(raw.encode() if isinstance(raw, str) else raw)

    async def pop(self) -> dict[str, Any]:
        raw = await asyncio.wait_for(self.outbound.get(), timeout=RESPONSE_TIMEOUT)
        return json.loads(raw)


@pytest.fixture
def settings():
    """Settings independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def registry():
    """Registry with an Echo tool, a res:// resource and a res:// template."""
    reg = Registry()
    reg.register_resource("Res", "res://{id}", read_res)
    reg.register_resource_template(
        "Res", "res://{id}", read_res, description="resource by id"
    )
    reg.register_tool("Echo", echo, description="echo a message")
    return reg


@pytest.fixture
async def transport(registry, settings):
    """A running server on an in-memory transport."""
    tr = MemoryTransport()
    server = Server(registry, tr, settings)
    task = asyncio.create_task(server.run())
    yield tr
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


@pytest.fixture
def sample_jsonrpc_request():
    """Sample JSON-RPC request factory."""
    def _make_request(method: str, params: dict = None, id: Any = 1):
        return {
            "jsonrpc": "2.0",
            "id": id,
            "method": method,
            "params": params or {},
        }
    return _make_request


@pytest.fixture
def rpc(transport, sample_jsonrpc_request):
    """Send one request through the running server and return its response."""
    async def _call(method: str, params: dict = None, id: Any = 1) -> dict[str, Any]:
        await transport.push(sample_jsonrpc_request(method, params, id))
        return await transport.pop()
    return _call
