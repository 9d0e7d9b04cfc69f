"""Meta-tools — discover and execute routed tools through the MCP server.

The server exposes a fixed set of meta-tools instead of one MCP tool per
route, so routes registered or removed at run time never require the
server's own tool list to change:
  - list_routed_tools
  - get_tool_info
  - search_tools
  - execute_tool
"""

from __future__ import annotations

import uuid
from typing import Any

from fastmcp import FastMCP
from mcp.shared.exceptions import McpError

from ..exceptions import ToolNotFoundError, ToolRouterError
from ..logging_config import call_id_ctx, create_logger
from .context import ToolCallContext
from .router import ToolRouter

logger = create_logger(__name__)


def routed_tools_summary(router: ToolRouter[Any]) -> dict[str, Any]:
    """Names and provenance of every routed tool, sorted by name."""
    tools = [
        {"name": name, "dynamic": router.is_dynamic(name)} for name in sorted(router.names())
    ]
    return {
        "tool_count": len(router),
        "static_count": router.static_count(),
        "dynamic_count": router.dynamic_count(),
        "tools": tools,
    }


def tool_info(router: ToolRouter[Any], tool_name: str) -> dict[str, Any]:
    """Full descriptor of one tool, or an error payload."""
    route = router.get(tool_name)
    if route is None:
        return {
            "error": (
                f"Unknown tool: {tool_name!r}. Use search_tools or list_routed_tools to find tools."
            ),
        }
    info = route.descriptor.to_dict()
    info["dynamic"] = route.dynamic
    return info


def find_tools(router: ToolRouter[Any], query: str) -> dict[str, Any]:
    """Case-insensitive substring search over names and descriptions."""
    query_lower = query.lower()
    results: list[dict[str, Any]] = []
    for descriptor in sorted(router.list_tools(), key=lambda d: d.name):
        description = descriptor.description or ""
        if query_lower in descriptor.name.lower() or query_lower in description.lower():
            results.append(
                {
                    "name": descriptor.name,
                    "description": description,
                    "dynamic": router.is_dynamic(descriptor.name),
                }
            )
    return {"query": query, "result_count": len(results), "tools": results}


async def run_tool(
    router: ToolRouter[Any],
    service: Any,
    tool_name: str,
    arguments: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Dispatch one call and render the outcome as a JSON payload."""
    token = call_id_ctx.set(uuid.uuid4().hex[:12])
    try:
        context = ToolCallContext(name=tool_name, service=service, arguments=arguments)
        try:
            result = await router.dispatch(context)
        except ToolNotFoundError as e:
            return {
                "error": f"{e.message}. Use search_tools or list_routed_tools to find tools.",
                "error_code": e.error_code,
            }
        except ToolRouterError as e:
            return {"error": e.message, "error_code": e.error_code}
        except McpError as e:
            return {"error": e.error.message, "code": e.error.code, "data": e.error.data}
        except Exception as e:
            logger.exception("Tool %s failed", tool_name)
            return {"error": f"Tool {tool_name} failed: {e}"}
        logger.info("Executed tool %s", tool_name)
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)
    finally:
        call_id_ctx.reset(token)


def register_meta_tools(mcp: FastMCP, router: ToolRouter[Any], service: Any = None) -> None:
    """Register the 4 meta-tools with the FastMCP server."""

    @mcp.tool()
    def list_routed_tools() -> dict[str, Any]:
        """List every routed tool with its provenance (static or dynamic).

        Use get_tool_info to see a tool's description and input schema.
        """
        return routed_tools_summary(router)

    @mcp.tool()
    def get_tool_info(tool_name: str) -> dict[str, Any]:
        """Get the description, input schema and annotations of one tool.

        Args:
            tool_name: Name from list_routed_tools or search_tools.
        """
        return tool_info(router, tool_name)

    @mcp.tool()
    def search_tools(query: str) -> dict[str, Any]:
        """Search for tools by name or description.

        Args:
            query: Search term matched case-insensitively.
        """
        return find_tools(router, query)

    @mcp.tool()
    async def execute_tool(
        tool_name: str, arguments: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Execute a routed tool by name with the given arguments.

        Args:
            tool_name: Name of the tool to execute.
            arguments: Tool arguments as a JSON object (optional).
        """
        return await run_tool(router, service, tool_name, arguments)
