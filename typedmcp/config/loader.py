"""Configuration loading from environment and YAML files."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROVIDERS = ["users"]


class Settings(BaseSettings):
    """Application settings loaded from TYPEDMCP_* environment variables."""

    # Server identity reported by initialize
    server_name: str = "typedmcp"
    server_version: str = "0.1.0"
    protocol_version: str = "2025-03-26"

    # Transport selection for the main entrypoint
    transport: Literal["stdio", "http"] = "stdio"

    # HTTP transport
    host: str = "0.0.0.0"
    port: int = 8080
    queue_size: int = 16  # inbound exchanges waiting for the server loop

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Outbound fetches made by providers
    fetch_timeout: float = 30.0

    # YAML file listing enabled providers
    providers_config: str = "config/providers.yaml"

    model_config = SettingsConfigDict(
        env_prefix="TYPEDMCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_providers_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load provider configuration from a YAML file.

    Args:
        config_path: Path to the config file. If None, uses the path from settings.

    Returns:
        Dictionary with configuration data; defaults when the file is missing.
    """
    if config_path is None:
        config_path = get_settings().providers_config

    config_path = Path(config_path)
    if not config_path.exists():
        return {"enabled_providers": list(DEFAULT_PROVIDERS)}

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return config


def get_enabled_providers(config: dict[str, Any] | None = None) -> list[str]:
    """Get list of enabled provider names."""
    if config is None:
        config = load_providers_config()
    return list(config.get("enabled_providers", DEFAULT_PROVIDERS))
