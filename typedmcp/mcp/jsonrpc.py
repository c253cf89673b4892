"""JSON-RPC 2.0 message processing."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from typedmcp.mcp.errors import INVALID_PARAMS, make_error_data
from typedmcp.mcp.handlers import MCPHandlers
from typedmcp.mcp.models import JsonRpcError, JsonRpcRequest, JsonRpcResponse
from typedmcp.utils.logging import set_request_id

logger = logging.getLogger(__name__)


class JsonRpcProcessor:
    """Process JSON-RPC 2.0 messages."""

    def __init__(self, handlers: MCPHandlers):
        self.handlers = handlers

    def parse_request(
        self, raw_data: str | bytes
    ) -> tuple[JsonRpcRequest | None, JsonRpcResponse | None]:
        """
        Parse a JSON-RPC request from raw data.

        Returns (request, error_response) tuple. One will be None. Every
        envelope problem is reported as Invalid params; the id is echoed
        when it can be recovered.
        """
        try:
            if isinstance(raw_data, bytes):
                raw_data = raw_data.decode("utf-8")
            data = json.loads(raw_data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            return None, self._error_response(None, f"Invalid JSON: {e}")

        if not isinstance(data, dict):
            return None, self._error_response(None, "Invalid JSON-RPC request: expected an object")

        try:
            return JsonRpcRequest(**data), None
        except ValidationError as e:
            return None, self._error_response(
                data.get("id"),
                f"Invalid JSON-RPC request: {e.error_count()} validation error(s)",
            )

    async def process_request(
        self, request: JsonRpcRequest
    ) -> JsonRpcResponse | None:
        """
        Process a validated JSON-RPC request.

        Returns None for notifications (requests without id).
        """
        set_request_id(request.id)
        result, error = await self.handlers.dispatch(request.method, request.params)

        # Notifications don't get responses
        if request.is_notification:
            if error is not None:
                logger.debug(f"Notification {request.method} failed: {error['message']}")
            return None

        if error is not None:
            return JsonRpcResponse(id=request.id, error=JsonRpcError(**error))
        return JsonRpcResponse(id=request.id, result=result)

    async def handle_message(self, raw_data: str | bytes) -> JsonRpcResponse | None:
        """
        Handle a raw JSON-RPC message end-to-end.

        Returns a response or None for notifications.
        """
        request, error_response = self.parse_request(raw_data)
        if error_response is not None:
            return error_response
        return await self.process_request(request)  # type: ignore[arg-type]

    def serialize_response(self, response: JsonRpcResponse) -> str:
        """Serialize a JSON-RPC response to JSON string."""
        return json.dumps(response.model_dump())

    @staticmethod
    def _error_response(request_id: Any, message: str) -> JsonRpcResponse:
        return JsonRpcResponse(
            id=request_id,
            error=JsonRpcError(**make_error_data(INVALID_PARAMS, message)),
        )
