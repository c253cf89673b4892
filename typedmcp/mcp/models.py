"""Pydantic models for MCP JSON-RPC 2.0 protocol."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from typedmcp.schema import Schema


# =============================================================================
# JSON-RPC 2.0 Base Models
# =============================================================================


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: Any = None  # echoed verbatim; absent for notifications
    method: str
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        """True when the message carries no id member at all."""
        return "id" not in self.model_fields_set


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response object."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: Any = None
    result: Any = None
    error: JsonRpcError | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Custom serialization: exactly one of result / error."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result
        return data


# =============================================================================
# MCP Content Types
# =============================================================================


class TextContent(BaseModel):
    """Text block inside a tool result's content array."""

    type: Literal["text"] = "text"
    text: str


class ResourceContent(BaseModel):
    """One entry of a resources/read contents array."""

    uri: str
    mimeType: str = "application/json"
    text: str


# =============================================================================
# MCP Tool and Resource Listings
# =============================================================================


class Tool(BaseModel):
    """Tool metadata as listed by tools/list."""

    name: str = Field(..., description="Unique tool name")
    description: str | None = None
    inputSchema: Schema
    outputSchema: Schema | None = None


class Resource(BaseModel):
    """Resource metadata as listed by resources/list."""

    name: str
    uri: str
    description: str | None = None
    mimeType: str = "application/json"
    jsonSchema: Schema | None = None


class ResourceTemplate(BaseModel):
    """Resource template metadata as listed by resources/templates/list."""

    name: str
    uriTemplate: str
    description: str | None = None
    mimeType: str = "application/json"
    jsonSchema: Schema | None = None


class ToolCallResult(BaseModel):
    """Result of a tool call."""

    content: list[TextContent]
    structuredContent: Any = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Leave structuredContent out unless the tool declared an output schema."""
        data: dict[str, Any] = {"content": [c.model_dump() for c in self.content]}
        if self.structuredContent is not None:
            data["structuredContent"] = self.structuredContent
        return data


# =============================================================================
# MCP Protocol Models
# =============================================================================


class ClientInfo(BaseModel):
    """Client information sent during initialization."""

    name: str
    version: str


class ServerInfo(BaseModel):
    """Server information returned during initialization."""

    name: str
    version: str


class ToolsCapability(BaseModel):
    listChanged: bool = False


class ResourcesCapability(BaseModel):
    listChanged: bool = False
    subscribe: bool = False


class PromptsCapability(BaseModel):
    offered: bool = False


class Capabilities(BaseModel):
    """Server capabilities; every flag is off."""

    tools: ToolsCapability = Field(default_factory=ToolsCapability)
    resources: ResourcesCapability = Field(default_factory=ResourcesCapability)
    prompts: PromptsCapability = Field(default_factory=PromptsCapability)


class InitializeParams(BaseModel):
    """Parameters for initialize request."""

    protocolVersion: str
    capabilities: dict[str, Any] = Field(default_factory=dict)
    clientInfo: ClientInfo


class InitializeResult(BaseModel):
    """Result of initialize request."""

    protocolVersion: str
    capabilities: Capabilities
    serverInfo: ServerInfo


class ToolsListResult(BaseModel):
    """Result of tools/list request."""

    tools: list[Tool]


class ResourcesListResult(BaseModel):
    """Result of resources/list request."""

    resources: list[Resource]


class ResourceTemplatesListResult(BaseModel):
    """Result of resources/templates/list request."""

    resourceTemplates: list[ResourceTemplate]


class ToolCallParams(BaseModel):
    """Parameters for tools/call request."""

    name: str
    arguments: Any = None  # raw payload, decoded against the tool's request type


class ResourceReadParams(BaseModel):
    """Parameters for resources/read request."""

    model_config = ConfigDict(populate_by_name=True)

    uri: str = Field(..., min_length=1)
    meta: Any = Field(default=None, alias="_meta")


class ResourceReadResult(BaseModel):
    """Result of resources/read request."""

    contents: list[ResourceContent]
