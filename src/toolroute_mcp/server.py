"""Tool router MCP server — entry point."""

from __future__ import annotations

import importlib
from typing import Any

from fastmcp import FastMCP

from .config import ServerConfig
from .logging_config import create_logger, setup_logging
from .resources import register_tool_resources
from .tools import ToolRouter, register_meta_tools

logger = create_logger(__name__)


def load_router(reference: str) -> ToolRouter[Any]:
    """Resolve a ``module:attribute`` reference to a ``ToolRouter``.

    The attribute is either a router or a zero-argument callable that
    builds one.

    Raises:
        ValueError: ``reference`` is not of the form ``module:attribute``.
        TypeError: the attribute does not yield a ``ToolRouter``.
    """
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Routes reference must look like 'module:attribute', got {reference!r}")

    target = getattr(importlib.import_module(module_name), attr)
    if not isinstance(target, ToolRouter) and callable(target):
        target = target()
    if not isinstance(target, ToolRouter):
        raise TypeError(f"{reference} is {type(target).__name__}, expected a ToolRouter")

    logger.info("Loaded %d routed tool(s) from %s", len(target), reference)
    return target


def create_server(
    router: ToolRouter[Any] | None = None,
    service: Any = None,
    config: ServerConfig | None = None,
) -> FastMCP:
    """Create and configure the MCP server around ``router``.

    ``service`` is handed to every routed call as ``context.service``.
    Without a router, the one named by ``config.routes`` is loaded, or an
    empty router is served that the embedding code can fill later.
    """
    if config is None:
        config = ServerConfig.from_env()
    if router is None:
        router = load_router(config.routes) if config.routes else ToolRouter()

    mcp = FastMCP(config.name)

    # Register the 4 meta-tools that front the router
    register_meta_tools(mcp, router, service)

    # Register MCP resources (read-only registry state)
    register_tool_resources(mcp, router)

    return mcp


def main() -> None:
    """CLI entry point; serves the router named by ``TOOLROUTE_ROUTES``."""
    config = ServerConfig.from_env()
    setup_logging(config.log_level, config.log_format)
    server = create_server(config=config)
    server.run()


if __name__ == "__main__":
    main()
