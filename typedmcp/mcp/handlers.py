"""MCP method handlers for JSON-RPC requests."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from typedmcp.config.loader import Settings, get_settings
from typedmcp.mcp.errors import (
    HANDLER_ERROR,
    METHOD_NOT_FOUND,
    HandlerError,
    InvalidParamsError,
    McpError,
    MethodNotFoundError,
    make_error_data,
)
from typedmcp.mcp.models import (
    Capabilities,
    InitializeParams,
    InitializeResult,
    ResourceContent,
    ResourceReadParams,
    ResourceReadResult,
    ResourcesListResult,
    ResourceTemplatesListResult,
    ServerInfo,
    TextContent,
    ToolCallParams,
    ToolCallResult,
    ToolsListResult,
)
from typedmcp.mcp.registry import Registry

logger = logging.getLogger(__name__)

# Resource reads always return JSON text
RESOURCE_MIME_TYPE = "application/json"
RESOURCE_URI_SUFFIX = "#json"


def _invalid_params(e: ValidationError) -> InvalidParamsError:
    return InvalidParamsError(
        data=[
            {"loc": list(err["loc"]), "msg": err["msg"]}
            for err in e.errors(include_url=False)
        ]
    )


class MCPHandlers:
    """Handlers for MCP protocol methods."""

    def __init__(self, registry: Registry, settings: Settings | None = None):
        self.registry = registry
        self.settings = settings or get_settings()

    async def handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the initialize request. The answer never depends on the registry."""
        try:
            init_params = InitializeParams(**params)
            logger.info(
                f"Initialize from {init_params.clientInfo.name} "
                f"{init_params.clientInfo.version} ({init_params.protocolVersion})"
            )
        except ValidationError as e:
            # Still answer; the handshake params are informational only
            logger.warning(f"Invalid initialize params: {e.error_count()} error(s)")

        result = InitializeResult(
            protocolVersion=self.settings.protocol_version,
            capabilities=Capabilities(),
            serverInfo=ServerInfo(
                name=self.settings.server_name,
                version=self.settings.server_version,
            ),
        )
        return result.model_dump()

    async def handle_initialized(self, params: dict[str, Any]) -> None:
        """Handle the notifications/initialized notification (no response)."""
        logger.info("Client confirmed initialization")
        return None

    async def handle_tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the tools/list request."""
        result = ToolsListResult(tools=self.registry.list_tools())
        return result.model_dump(exclude_none=True)

    async def handle_resources_list(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the resources/list request."""
        result = ResourcesListResult(resources=self.registry.list_resources())
        return result.model_dump(exclude_none=True)

    async def handle_resource_templates_list(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the resources/templates/list request."""
        result = ResourceTemplatesListResult(
            resourceTemplates=self.registry.list_resource_templates()
        )
        return result.model_dump(exclude_none=True)

    async def handle_tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        Handle the tools/call request.

        Arguments are decoded into the tool's request type. Tools that
        declare an output schema answer with structuredContent plus a JSON
        text block; others with a single text block holding str(result).
        """
        try:
            call_params = ToolCallParams(**params)
        except ValidationError as e:
            raise _invalid_params(e) from e

        tool = self.registry.find_tool(call_params.name)
        if tool is None:
            raise MethodNotFoundError(call_params.name)

        arguments = {} if call_params.arguments is None else call_params.arguments
        request = tool.handler.decode(arguments)

        logger.info(f"Calling tool: {call_params.name}")
        try:
            value = await tool.handler.call(request)
        except McpError:
            raise
        except Exception as e:
            logger.exception(f"Error executing tool {call_params.name}")
            raise HandlerError(str(e)) from e

        if tool.output_schema is None:
            return ToolCallResult(content=[TextContent(text=str(value))]).model_dump()

        structured = tool.handler.encode(value)
        return ToolCallResult(
            content=[TextContent(text=json.dumps(structured))],
            structuredContent=structured,
        ).model_dump()

    async def handle_resources_read(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the resources/read request."""
        try:
            read_params = ResourceReadParams(**params)
        except ValidationError as e:
            raise _invalid_params(e) from e

        resource = self.registry.find_resource(read_params.uri)
        if resource is None:
            raise MethodNotFoundError(read_params.uri)

        logger.info(f"Reading resource: {read_params.uri}")
        try:
            value = await resource.handler.read(read_params.uri)
        except McpError:
            raise
        except Exception as e:
            logger.exception(f"Error reading resource {read_params.uri}")
            raise HandlerError(str(e)) from e

        result = ResourceReadResult(
            contents=[
                ResourceContent(
                    uri=read_params.uri + RESOURCE_URI_SUFFIX,
                    mimeType=RESOURCE_MIME_TYPE,
                    text=resource.handler.encode(value),
                )
            ]
        )
        return result.model_dump()

    async def dispatch(
        self, method: str, params: dict[str, Any]
    ) -> tuple[Any | None, dict[str, Any] | None]:
        """
        Dispatch a method call to the appropriate handler.

        Returns (result, error) tuple. One will be None.
        """
        handlers = {
            "initialize": self.handle_initialize,
            "notifications/initialized": self.handle_initialized,
            "tools/list": self.handle_tools_list,
            "tools/call": self.handle_tools_call,
            "resources/list": self.handle_resources_list,
            "resources/templates/list": self.handle_resource_templates_list,
            "resources/read": self.handle_resources_read,
        }

        handler = handlers.get(method)
        if handler is None:
            return None, make_error_data(
                METHOD_NOT_FOUND, f"method not found: {method}"
            )

        try:
            result = await handler(params)
            return result, None
        except McpError as e:
            return None, e.to_error_data()
        except Exception as e:
            logger.exception(f"Error handling method {method}")
            return None, make_error_data(HANDLER_ERROR, str(e))
