"""Line-delimited JSON transport over a byte stream (stdin/stdout by default)."""

import asyncio
import logging
import sys

from typedmcp.transport.base import InboundMessage, Transport, TransportClosed

logger = logging.getLogger(__name__)

# Upper bound for one inbound line
MAX_LINE_BYTES = 16 * 1024 * 1024


class StdioTransport(Transport):
    """
    One JSON-RPC message per line in, one per line out.

    All replies share the one output stream; writes are serialised so that
    concurrently finishing handlers never interleave within a line.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self._reader = reader
        self._writer = writer
        self._write_lock = asyncio.Lock()
        self._closed = False

    @classmethod
    async def from_stdio(cls) -> "StdioTransport":
        """Attach to the process's stdin and stdout."""
        loop = asyncio.get_running_loop()

        reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
        await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), sys.stdin
        )
        write_transport, write_protocol = await loop.connect_write_pipe(
            asyncio.streams.FlowControlMixin, sys.stdout
        )
        writer = asyncio.StreamWriter(write_transport, write_protocol, reader, loop)
        return cls(reader, writer)

    async def receive(self) -> InboundMessage:
        while not self._closed:
            try:
                line = await self._reader.readline()
            except ValueError:
                logger.warning(f"Discarding inbound line longer than {MAX_LINE_BYTES} bytes")
                continue
            if not line:
                break
            line = line.strip()
            if line:
                return InboundMessage(payload=line)
        raise TransportClosed("end of input")

    async def send(self, message: InboundMessage, response: str | None) -> None:
        if response is None:
            return
        async with self._write_lock:
            self._writer.write(response.encode("utf-8") + b"\n")
            await self._writer.drain()

    async def close(self) -> None:
        self._closed = True
