"""MCP (Model Context Protocol) implementation with JSON-RPC 2.0."""

from typedmcp.mcp.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    JsonRpcError,
    Tool,
    Resource,
    ResourceTemplate,
    TextContent,
    ToolCallResult,
)
from typedmcp.mcp.bindings import ToolHandler, ResourceHandler
from typedmcp.mcp.registry import (
    Registry,
    ToolDescriptor,
    ResourceDescriptor,
    ResourceTemplateDescriptor,
)
from typedmcp.mcp.server import Server
from typedmcp.mcp.errors import (
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    HANDLER_ERROR,
    McpError,
    InvalidParamsError,
    MethodNotFoundError,
    HandlerError,
)

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "Tool",
    "Resource",
    "ResourceTemplate",
    "TextContent",
    "ToolCallResult",
    "ToolHandler",
    "ResourceHandler",
    "Registry",
    "ToolDescriptor",
    "ResourceDescriptor",
    "ResourceTemplateDescriptor",
    "Server",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "HANDLER_ERROR",
    "McpError",
    "InvalidParamsError",
    "MethodNotFoundError",
    "HandlerError",
]
