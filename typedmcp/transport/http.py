"""Request/response transport: one JSON-RPC message per HTTP POST."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from typedmcp.transport.base import InboundMessage, Transport, TransportClosed

logger = logging.getLogger(__name__)


@dataclass
class _Exchange:
    """An HTTP request waiting for its JSON-RPC reply."""

    key: str
    payload: bytes
    reply: asyncio.Future = field(repr=False)


class HttpTransport(Transport):
    """
    Serves JSON-RPC over HTTP POST.

    Each POST body is one message and the reply is written to that same
    exchange, so any number of exchanges can be in flight. Exchanges are
    keyed by a transport-assigned token rather than the envelope id, which
    different clients are free to reuse. Accepted exchanges wait in a
    bounded queue; when it is full, new requests wait for room.
    """

    def __init__(self, queue_size: int = 16):
        self._queue: asyncio.Queue[_Exchange | None] = asyncio.Queue(maxsize=queue_size)
        self._pending: dict[str, asyncio.Future] = {}
        self._pending_lock = asyncio.Lock()
        self._closed = False
        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        app = FastAPI(
            title="typedmcp",
            description="JSON-RPC endpoint for typed MCP tools and resources",
        )
        app.add_api_route("/", self.handle_post, methods=["POST"])
        app.add_api_route("/message", self.handle_post, methods=["POST"])

        @app.get("/health")
        async def health() -> dict:
            """Health check endpoint."""
            return {"status": "ok"}

        return app

    @property
    def pending_count(self) -> int:
        """Exchanges handed to the server loop and not yet answered."""
        return len(self._pending)

    async def handle_post(self, request: Request) -> Response:
        """Queue the body as one message and wait for its reply."""
        if self._closed:
            return JSONResponse(status_code=503, content={"error": "Server shutting down"})

        body = await request.body()
        exchange = _Exchange(
            key=uuid.uuid4().hex,
            payload=body,
            reply=asyncio.get_running_loop().create_future(),
        )
        try:
            await self._queue.put(exchange)
            payload = await exchange.reply
        finally:
            # Client gone or reply delivered: either way the slot is done
            async with self._pending_lock:
                self._pending.pop(exchange.key, None)

        if payload is None:
            # Notification
            return Response(status_code=202)
        return Response(content=payload, media_type="application/json")

    async def receive(self) -> InboundMessage:
        if self._closed and self._queue.empty():
            raise TransportClosed("transport closed")

        exchange = await self._queue.get()
        if exchange is None:
            raise TransportClosed("transport closed")

        async with self._pending_lock:
            self._pending[exchange.key] = exchange.reply
        return InboundMessage(payload=exchange.payload, correlation_id=exchange.key)

    async def send(self, message: InboundMessage, response: str | None) -> None:
        async with self._pending_lock:
            reply = self._pending.pop(message.correlation_id, None)
        if reply is None:
            logger.debug(f"Dropping reply for unknown exchange {message.correlation_id}")
            return
        if not reply.done():
            reply.set_result(response)

    async def close(self) -> None:
        """Refuse new exchanges and wake the server loop once the queue drains."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            # receive() notices the closed flag once the backlog is drained
            pass

    async def serve(self, host: str, port: int) -> None:
        """Run the HTTP listener with uvicorn until it shuts down."""
        config = uvicorn.Config(self.app, host=host, port=port, log_config=None)
        server = uvicorn.Server(config)
        try:
            await server.serve()
        finally:
            await self.close()
