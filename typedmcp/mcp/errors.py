"""JSON-RPC 2.0 error codes, exceptions and error response helpers."""

from typing import Any

# Standard JSON-RPC 2.0 error codes
METHOD_NOT_FOUND = -32601  # The method, tool or resource does not exist
INVALID_PARAMS = -32602  # Malformed envelope, params or arguments

# Server-defined error codes (must be between -32000 and -32099)
HANDLER_ERROR = -32000  # A tool or resource handler failed


def error_message(code: int) -> str:
    """Get the standard message for a JSON-RPC error code."""
    messages = {
        METHOD_NOT_FOUND: "Method not found",
        INVALID_PARAMS: "Invalid params",
        HANDLER_ERROR: "Handler error",
    }
    return messages.get(code, "Unknown error")


def make_error_data(code: int, message: str | None = None, data: Any = None) -> dict[str, Any]:
    """Create an error object for JSON-RPC response."""
    error: dict[str, Any] = {
        "code": code,
        "message": message if message is not None else error_message(code),
    }
    if data is not None:
        error["data"] = data
    return error


class McpError(Exception):
    """Base class for errors that map onto a JSON-RPC error object."""

    code: int = HANDLER_ERROR

    def __init__(self, message: str | None = None, data: Any = None):
        self.message = message if message is not None else error_message(self.code)
        self.data = data
        super().__init__(self.message)

    def to_error_data(self) -> dict[str, Any]:
        return make_error_data(self.code, self.message, self.data)


class InvalidParamsError(McpError):
    """Params or arguments could not be decoded into the expected shape."""

    code = INVALID_PARAMS


class MethodNotFoundError(McpError):
    """Unknown method, tool name or resource URI."""

    code = METHOD_NOT_FOUND

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"method not found: {name}")


class HandlerError(McpError):
    """A registered handler raised; the message is the handler's error text."""

    code = HANDLER_ERROR
