"""Static upstream registry config loader."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Upstream server definition loaded from static config."""

    name: str = Field(..., min_length=1)
    url: str
    description: str | None = None
    is_active: bool = True
    tools: dict[str, bool] = Field(default_factory=dict)
    enabled_for: list[str] = Field(default_factory=lambda: ["*"])


class ServerRegistryConfig(BaseModel):
    """Container for server definitions."""

    servers: list[ServerConfig] = Field(default_factory=list)


def load_server_registry(config_path: str | None = None) -> ServerRegistryConfig:
    """Load upstream server registry config from YAML.

    Args:
        config_path: Optional custom path for the server registry config.

    Returns:
        Parsed ServerRegistryConfig, or an empty config if the file is missing.
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "upstreams.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        return ServerRegistryConfig()

    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    return ServerRegistryConfig(**data)
