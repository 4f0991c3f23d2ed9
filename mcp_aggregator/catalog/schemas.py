"""Schemas describing which upstreams a catalog is built from."""

from pydantic import BaseModel, ConfigDict, Field


class UpstreamConfig(BaseModel):
    """One upstream server as resolved for a caller.
    
    Attributes:
        name: Unique upstream name, used as the tool namespace prefix.
        url: Endpoint the upstream is reached at.
        tool_enabled: Optional raw tool name to enabled flag mapping.
            Tools without an entry are enabled.
    """
    
    name: str = Field(..., min_length=1, description="Unique upstream name")
    url: str = Field(..., min_length=1, description="Upstream MCP endpoint URL")
    tool_enabled: dict[str, bool] | None = Field(default=None, description="Per-tool enable flags")

    model_config = ConfigDict(frozen=True)

    def is_tool_enabled(self, raw_name: str) -> bool:
        """A tool is enabled unless explicitly flagged ``False``."""
        if not self.tool_enabled:
            return True
        return self.tool_enabled.get(raw_name, True)

    def cache_key(self) -> tuple[str, str]:
        return (self.name, self.url)
