"""MCP Resources — read-only registry state exposed to clients."""

from __future__ import annotations

import json
from typing import Any

from fastmcp import FastMCP

from ..tools.router import ToolRouter


def tools_snapshot(router: ToolRouter[Any]) -> str:
    """JSON list of all descriptors with their provenance, sorted by name."""
    tools = []
    for descriptor in sorted(router.list_tools(), key=lambda d: d.name):
        entry = descriptor.to_dict()
        entry["dynamic"] = router.is_dynamic(descriptor.name)
        tools.append(entry)
    return json.dumps({"count": len(tools), "tools": tools}, indent=2)


def register_tool_resources(mcp: FastMCP, router: ToolRouter[Any]) -> None:
    """Register registry-related MCP resources."""

    @mcp.resource("toolroute://tools")
    def routed_tools() -> str:
        """All routed tools with description, input schema and provenance."""
        return tools_snapshot(router)
