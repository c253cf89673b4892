"""Process entrypoints: build the registry and serve it over stdio or HTTP."""

import asyncio

from fastapi import FastAPI

from typedmcp.config.loader import Settings, get_settings, load_providers_config, get_enabled_providers
from typedmcp.mcp.registry import Registry
from typedmcp.mcp.server import Server
from typedmcp.transport.http import HttpTransport
from typedmcp.transport.stdio import StdioTransport
from typedmcp.utils.http import close_shared_client
from typedmcp.utils.logging import setup_logging, get_logger


def build_registry(settings: Settings | None = None) -> Registry:
    """Create a registry and load the providers enabled in the YAML config."""
    settings = settings or get_settings()
    log = get_logger("startup")

    config = load_providers_config(settings.providers_config)
    enabled_providers = get_enabled_providers(config)
    log.info("Loading providers", providers=enabled_providers)

    registry = Registry()
    results = registry.load_providers(enabled_providers)
    for provider, success in results.items():
        if success:
            log.info("Loaded provider", provider=provider)
        else:
            log.warning("Failed to load provider", provider=provider)

    log.info(
        "Registry ready",
        tool_count=registry.tool_count,
        resource_count=registry.resource_count,
        resource_template_count=registry.resource_template_count,
        provider_count=registry.provider_count,
    )
    return registry


def add_info_route(app: FastAPI, registry: Registry, settings: Settings) -> None:
    """Expose server identity and registry counts at GET /info."""

    @app.get("/info")
    async def info() -> dict:
        return {
            "name": settings.server_name,
            "version": settings.server_version,
            "mcp_protocol_version": settings.protocol_version,
            "endpoints": {"message": "/", "health": "/health"},
            "tools_available": registry.tool_count,
            "resources_available": registry.resource_count,
            "resource_templates_available": registry.resource_template_count,
        }


async def serve_stdio(settings: Settings | None = None) -> None:
    """Serve newline-delimited JSON-RPC on stdin/stdout until stdin closes."""
    settings = settings or get_settings()
    registry = build_registry(settings)
    transport = await StdioTransport.from_stdio()
    try:
        await Server(registry, transport, settings).run()
    finally:
        await close_shared_client()


async def serve_http(settings: Settings | None = None) -> None:
    """Serve JSON-RPC over HTTP POST until the listener shuts down."""
    settings = settings or get_settings()
    log = get_logger("startup")

    registry = build_registry(settings)
    transport = HttpTransport(queue_size=settings.queue_size)
    add_info_route(transport.app, registry, settings)
    server = Server(registry, transport, settings)

    log.info("Starting HTTP transport", host=settings.host, port=settings.port)
    loop_task = asyncio.create_task(server.run())
    try:
        await transport.serve(settings.host, settings.port)
        await loop_task
    finally:
        loop_task.cancel()
        await close_shared_client()
        log.info("Shutting down MCP server")


def main() -> None:
    """Run the transport selected by TYPEDMCP_TRANSPORT."""
    settings = get_settings()
    setup_logging(settings)
    get_logger("startup").info(
        "Starting MCP server",
        server_name=settings.server_name,
        version=settings.server_version,
        transport=settings.transport,
    )
    if settings.transport == "http":
        asyncio.run(serve_http(settings))
    else:
        asyncio.run(serve_stdio(settings))


def stdio_main() -> None:
    """Run the server on stdin/stdout."""
    settings = get_settings()
    setup_logging(settings)
    asyncio.run(serve_stdio(settings))


def http_main() -> None:
    """Run the server over HTTP."""
    settings = get_settings()
    setup_logging(settings)
    asyncio.run(serve_http(settings))


if __name__ == "__main__":
    main()
