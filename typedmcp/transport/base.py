"""Transport contract shared by every connection style."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class TransportClosed(Exception):
    """No further inbound messages will arrive."""


@dataclass(frozen=True)
class InboundMessage:
    """One raw inbound JSON-RPC message.

    ``correlation_id`` is the transport's own key for the exchange the
    message arrived on; it is handed back unchanged with the reply.
    """

    payload: bytes
    correlation_id: str | None = None


class Transport(ABC):
    """Moves raw JSON-RPC messages between peers and the server loop."""

    @abstractmethod
    async def receive(self) -> InboundMessage:
        """
        Wait for the next inbound message.

        Raises TransportClosed at end of input. Cancelling the waiting task
        abandons the wait.
        """

    @abstractmethod
    async def send(self, message: InboundMessage, response: str | None) -> None:
        """
        Deliver the reply to ``message``.

        ``response`` is None for notifications, which get no reply body.
        A reply for an exchange the transport no longer knows is dropped.
        """

    @abstractmethod
    async def close(self) -> None:
        """Stop accepting messages."""
