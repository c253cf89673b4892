"""Server loop: pull messages from a transport and dispatch each concurrently."""

import asyncio

from typedmcp.config.loader import Settings
from typedmcp.mcp.handlers import MCPHandlers
from typedmcp.mcp.jsonrpc import JsonRpcProcessor
from typedmcp.mcp.registry import Registry
from typedmcp.transport.base import InboundMessage, Transport, TransportClosed
from typedmcp.utils.logging import get_logger

log = get_logger("server")


class Server:
    """
    Dispatches JSON-RPC messages from a transport against a registry.

    Every inbound message is handled on its own task, so replies may leave
    in a different order than requests arrived. A failing message only
    ever produces an error response for that message.
    """

    def __init__(
        self,
        registry: Registry,
        transport: Transport,
        settings: Settings | None = None,
    ):
        self.registry = registry
        self.transport = transport
        self.processor = JsonRpcProcessor(MCPHandlers(registry, settings))
        self._tasks: set[asyncio.Task[None]] = set()

    async def run(self) -> None:
        """
        Serve until the transport closes.

        Cancelling the task running this coroutine stops the loop; messages
        already being handled run to completion on their own.
        """
        log.info("Server loop started", transport=type(self.transport).__name__)
        while True:
            try:
                message = await self.transport.receive()
            except TransportClosed:
                break
            task = asyncio.create_task(self._handle(message))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        if self._tasks:
            await asyncio.gather(*self._tasks)
        log.info("Server loop stopped")

    @property
    def in_flight(self) -> int:
        """Number of messages currently being handled."""
        return len(self._tasks)

    async def _handle(self, message: InboundMessage) -> None:
        response = await self.processor.handle_message(message.payload)
        payload = None if response is None else self.processor.serialize_response(response)
        try:
            await self.transport.send(message, payload)
        except (OSError, RuntimeError) as e:
            # Peer went away; nothing left to answer
            log.warning("Reply not delivered", error=str(e))
