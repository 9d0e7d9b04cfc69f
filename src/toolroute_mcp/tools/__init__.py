"""Tool routing — descriptors, erased handlers, routes and the router."""

from .context import ToolCallContext
from .descriptor import ToolDescriptor
from .handler import (
    ArgumentExtractor,
    DynamicToolCall,
    DynamicToolHandler,
    ErasedToolCall,
    FunctionToolHandler,
    KeywordArguments,
    ModelArguments,
    TypedToolCall,
    error_result,
    into_call_tool_result,
    text_result,
)
from .meta import register_meta_tools
from .route import ToolBuilder, ToolRoute, into_tool_route, tool, tool_attr
from .router import ToolRouter
from .schema import empty_object_schema, ensure_object, schema_for_type

__all__ = [
    "ArgumentExtractor",
    "DynamicToolCall",
    "DynamicToolHandler",
    "ErasedToolCall",
    "FunctionToolHandler",
    "KeywordArguments",
    "ModelArguments",
    "ToolBuilder",
    "ToolCallContext",
    "ToolDescriptor",
    "ToolRoute",
    "ToolRouter",
    "TypedToolCall",
    "empty_object_schema",
    "ensure_object",
    "error_result",
    "into_call_tool_result",
    "into_tool_route",
    "register_meta_tools",
    "schema_for_type",
    "text_result",
    "tool",
    "tool_attr",
]
