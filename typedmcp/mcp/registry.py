"""Registry of typed tools, resources and resource templates."""

import importlib
import logging
from typing import Any, Callable

from typedmcp.mcp.bindings import ResourceHandler, ToolHandler
from typedmcp.mcp.models import Resource, ResourceTemplate, Tool
from typedmcp.schema import Schema, derive
from typedmcp.utils.locks import ReadWriteLock

logger = logging.getLogger(__name__)

# Marks the start of a placeholder in a templated URI
PLACEHOLDER = "{"

SchemaLike = Schema | dict[str, Any]


def _as_schema(value: SchemaLike | None) -> Schema | None:
    if value is None or isinstance(value, Schema):
        return value
    return Schema.model_validate(value)


def _copy(schema: Schema | None) -> Schema | None:
    return None if schema is None else schema.model_copy(deep=True)


def _template_prefix(uri: str) -> str | None:
    """Literal part before the first placeholder, or None if there is none."""
    i = uri.find(PLACEHOLDER)
    return uri[:i] if i > 0 else None


class ToolDescriptor:
    """A registered tool with its metadata and handler."""

    def __init__(
        self,
        name: str,
        handler: ToolHandler,
        description: str | None = None,
        input_schema: Schema | None = None,
        output_schema: Schema | None = None,
    ):
        self.name = name
        self.description = description
        if input_schema is None:
            input_schema = derive(handler.request_type)
        self.input_schema = input_schema
        self.output_schema = output_schema
        self._handler = handler

    @property
    def handler(self) -> ToolHandler:
        return self._handler

    def to_mcp_tool(self) -> Tool:
        """Convert to the listing model; the handler is not carried over."""
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=_copy(self.input_schema),
            outputSchema=_copy(self.output_schema),
        )


class ResourceDescriptor:
    """A registered resource at a literal or templated URI."""

    def __init__(
        self,
        name: str,
        uri: str,
        handler: ResourceHandler,
        description: str | None = None,
        json_schema: Schema | None = None,
    ):
        self.name = name
        self.uri = uri
        self.description = description
        self.json_schema = json_schema
        self._handler = handler

    @property
    def handler(self) -> ResourceHandler:
        return self._handler

    def matches(self, uri: str) -> bool:
        """Prefix match for templated URIs; literal URIs match exactly."""
        if self.uri == uri:
            return True
        prefix = _template_prefix(self.uri)
        return prefix is not None and uri.startswith(prefix)

    def to_mcp_resource(self) -> Resource:
        return Resource(
            name=self.name,
            uri=self.uri,
            description=self.description,
            jsonSchema=_copy(self.json_schema),
        )


class ResourceTemplateDescriptor:
    """A registered resource template, listed apart from plain resources."""

    def __init__(
        self,
        name: str,
        uri_template: str,
        handler: ResourceHandler,
        description: str | None = None,
        json_schema: Schema | None = None,
    ):
        self.name = name
        self.uri_template = uri_template
        self.description = description
        self.json_schema = json_schema
        self._handler = handler

    @property
    def handler(self) -> ResourceHandler:
        return self._handler

    def matches(self, uri: str) -> bool:
        prefix = _template_prefix(self.uri_template)
        if prefix is None:
            return self.uri_template == uri
        return uri.startswith(prefix)

    def to_mcp_resource_template(self) -> ResourceTemplate:
        return ResourceTemplate(
            name=self.name,
            uriTemplate=self.uri_template,
            description=self.description,
            jsonSchema=_copy(self.json_schema),
        )


def _resource_schema(handler: ResourceHandler, schema: SchemaLike | None) -> Schema:
    explicit = _as_schema(schema)
    if explicit is not None:
        return explicit
    return derive(handler.response_type)


class Registry:
    """
    Registry for tools, resources and resource templates.

    Registration takes the exclusive side of a read/write lock and is
    expected at startup; lookups and listings take the shared side and may
    run from any number of concurrent requests. Listings return metadata
    copies; ``find_*`` return the live descriptors for dispatch.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._tools: dict[str, ToolDescriptor] = {}
        self._resources: dict[str, ResourceDescriptor] = {}
        self._resource_templates: list[ResourceTemplateDescriptor] = []
        self._providers: set[str] = set()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_tool(
        self,
        name: str,
        handler: Callable[[Any], Any] | ToolHandler,
        *,
        description: str | None = None,
        input_schema: SchemaLike | None = None,
        output_schema: SchemaLike | None = None,
        request_type: Any = None,
        response_type: Any = None,
    ) -> "Registry":
        """
        Register a tool. Re-registering a name replaces the earlier tool.

        Input and output schemas are derived from the handler's request and
        response types unless given explicitly. A handler without a response
        type declares no output schema.
        """
        if not isinstance(handler, ToolHandler):
            handler = ToolHandler(handler, request_type, response_type)

        output = _as_schema(output_schema)
        if output is None and handler.response_type is not None:
            output = derive(handler.response_type)

        desc = ToolDescriptor(
            name=name,
            handler=handler,
            description=description,
            input_schema=_as_schema(input_schema),
            output_schema=output,
        )
        with self._lock.write():
            if name in self._tools:
                logger.warning(f"Tool '{name}' already registered, overwriting")
            self._tools[name] = desc
        logger.info(f"Registered tool: {name}")
        return self

    def register_resource(
        self,
        name: str,
        uri: str,
        handler: Callable[[str], Any] | ResourceHandler,
        *,
        description: str | None = None,
        schema: SchemaLike | None = None,
        response_type: Any = None,
    ) -> "Registry":
        """Register a resource at a literal URI or a templated one (``users://{id}``)."""
        if not isinstance(handler, ResourceHandler):
            handler = ResourceHandler(handler, response_type)

        desc = ResourceDescriptor(
            name=name,
            uri=uri,
            handler=handler,
            description=description,
            json_schema=_resource_schema(handler, schema),
        )
        with self._lock.write():
            if uri in self._resources:
                logger.warning(f"Resource '{uri}' already registered, overwriting")
            self._resources[uri] = desc
        logger.info(f"Registered resource: {name} ({uri})")
        return self

    def register_resource_template(
        self,
        name: str,
        uri_template: str,
        handler: Callable[[str], Any] | ResourceHandler,
        *,
        description: str | None = None,
        schema: SchemaLike | None = None,
        response_type: Any = None,
    ) -> "Registry":
        """Register a resource template; templates keep registration order."""
        if not isinstance(handler, ResourceHandler):
            handler = ResourceHandler(handler, response_type)

        desc = ResourceTemplateDescriptor(
            name=name,
            uri_template=uri_template,
            handler=handler,
            description=description,
            json_schema=_resource_schema(handler, schema),
        )
        with self._lock.write():
            self._resource_templates.append(desc)
        logger.info(f"Registered resource template: {name} ({uri_template})")
        return self

    def tool(self, name: str | None = None, **options: Any) -> Callable:
        """
        Decorator form of register_tool.

        Usage:
            @registry.tool("Echo", description="echo a message")
            async def echo(req: EchoRequest) -> EchoResponse:
                ...
        """
        def decorator(fn: Callable[[Any], Any]) -> Callable[[Any], Any]:
            self.register_tool(name or fn.__name__, fn, **options)
            return fn

        return decorator

    def resource(self, name: str, uri: str, **options: Any) -> Callable:
        """Decorator form of register_resource."""
        def decorator(fn: Callable[[str], Any]) -> Callable[[str], Any]:
            self.register_resource(name, uri, fn, **options)
            return fn

        return decorator

    def resource_template(self, name: str, uri_template: str, **options: Any) -> Callable:
        """Decorator form of register_resource_template."""
        def decorator(fn: Callable[[str], Any]) -> Callable[[str], Any]:
            self.register_resource_template(name, uri_template, fn, **options)
            return fn

        return decorator

    # ------------------------------------------------------------------
    # Listing (metadata copies only)
    # ------------------------------------------------------------------

    def list_tools(self) -> list[Tool]:
        with self._lock.read():
            return [tool.to_mcp_tool() for tool in self._tools.values()]

    def list_resources(self) -> list[Resource]:
        with self._lock.read():
            return [res.to_mcp_resource() for res in self._resources.values()]

    def list_resource_templates(self) -> list[ResourceTemplate]:
        with self._lock.read():
            return [t.to_mcp_resource_template() for t in self._resource_templates]

    # ------------------------------------------------------------------
    # Lookup (live descriptors, for dispatch)
    # ------------------------------------------------------------------

    def find_tool(self, name: str) -> ToolDescriptor | None:
        with self._lock.read():
            return self._tools.get(name)

    def find_resource(
        self, uri: str
    ) -> ResourceDescriptor | ResourceTemplateDescriptor | None:
        """
        Resolve a URI to the descriptor that serves it.

        Exact matches among resources win; then templated resources by
        prefix, then templates, each in registration order.
        """
        with self._lock.read():
            exact = self._resources.get(uri)
            if exact is not None:
                return exact
            for res in self._resources.values():
                if res.matches(uri):
                    return res
            for template in self._resource_templates:
                if template.matches(uri):
                    return template
        return None

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def load_provider(self, provider_name: str) -> bool:
        """
        Load a provider module and register its tools and resources.

        Bare names resolve to ``typedmcp.providers.<name>``; dotted names are
        imported as given. The module must expose ``register(registry)``.
        """
        with self._lock.read():
            if provider_name in self._providers:
                logger.debug(f"Provider '{provider_name}' already loaded")
                return True

        module_path = (
            provider_name if "." in provider_name
            else f"typedmcp.providers.{provider_name}"
        )
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            logger.warning(f"Could not import provider '{provider_name}': {e}")
            return False

        if not hasattr(module, "register"):
            logger.warning(f"Provider '{provider_name}' has no register function")
            return False

        module.register(self)
        with self._lock.write():
            self._providers.add(provider_name)
        logger.info(f"Loaded provider: {provider_name}")
        return True

    def load_providers(self, provider_names: list[str]) -> dict[str, bool]:
        """Load multiple providers, returning success status for each."""
        return {name: self.load_provider(name) for name in provider_names}

    @property
    def tool_count(self) -> int:
        with self._lock.read():
            return len(self._tools)

    @property
    def resource_count(self) -> int:
        with self._lock.read():
            return len(self._resources)

    @property
    def resource_template_count(self) -> int:
        with self._lock.read():
            return len(self._resource_templates)

    @property
    def provider_count(self) -> int:
        with self._lock.read():
            return len(self._providers)
