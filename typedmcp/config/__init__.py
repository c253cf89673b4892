"""Configuration loading and management."""

from typedmcp.config.loader import (
    Settings,
    get_settings,
    load_providers_config,
    get_enabled_providers,
)

__all__ = ["Settings", "get_settings", "load_providers_config", "get_enabled_providers"]
