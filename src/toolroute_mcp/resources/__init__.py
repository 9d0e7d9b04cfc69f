"""MCP resources for the tool router server."""

from .tools import register_tool_resources, tools_snapshot

__all__ = ["register_tool_resources", "tools_snapshot"]
