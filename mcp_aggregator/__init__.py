"""MCP Aggregator - one namespaced tool catalog over many upstream MCP servers."""

__version__ = "1.0.0"
