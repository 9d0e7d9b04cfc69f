"""toolroute-mcp — tool-call routing core for MCP servers."""

from .exceptions import (
    DuplicateToolError,
    InvalidNameError,
    InvalidSchemaError,
    ToolNotFoundError,
    ToolRegistrationError,
    ToolRouterError,
)
from .tools import (
    DynamicToolHandler,
    FunctionToolHandler,
    ToolCallContext,
    ToolDescriptor,
    ToolRoute,
    ToolRouter,
    tool,
    tool_attr,
)

__version__ = "0.1.0"

__all__ = [
    "DuplicateToolError",
    "DynamicToolHandler",
    "FunctionToolHandler",
    "InvalidNameError",
    "InvalidSchemaError",
    "ToolCallContext",
    "ToolDescriptor",
    "ToolNotFoundError",
    "ToolRegistrationError",
    "ToolRoute",
    "ToolRouter",
    "ToolRouterError",
    "__version__",
    "tool",
    "tool_attr",
]
