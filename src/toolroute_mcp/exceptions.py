"""Exception hierarchy for the tool router.

Registration and lookup failures are raised as typed exceptions so callers
can tell them apart from errors raised by tool handlers, which cross the
router untouched.
"""

from __future__ import annotations

from typing import Any

from mcp.types import INVALID_PARAMS, ErrorData


class ToolRouterError(Exception):
    """Base exception for all router errors."""

    error_code: str = ""

    def __init__(self, message: str, error_code: str | None = None, **kwargs: Any):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.__dict__.update(kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a serializable dict."""
        result: dict[str, Any] = {
            "error": True,
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
        }
        result.update(
            {k: v for k, v in self.__dict__.items() if k not in ["message", "error_code"]}
        )
        return result

    def to_error_data(self) -> ErrorData:
        """Convert error to the protocol's structured error payload."""
        return ErrorData(code=INVALID_PARAMS, message=self.message, data=self.to_dict())


class ToolRegistrationError(ToolRouterError):
    """Raised when a tool cannot be registered."""

    error_code = "TOOL_REGISTRATION_ERROR"


class InvalidNameError(ToolRegistrationError):
    """Raised when a tool name is empty."""

    error_code = "INVALID_NAME"

    def __init__(self, message: str = "Name cannot be empty", **kwargs: Any):
        super().__init__(message, "INVALID_NAME", **kwargs)


class DuplicateToolError(ToolRegistrationError):
    """Raised when a dynamic tool name is already registered."""

    error_code = "DUPLICATE_TOOL"

    def __init__(self, tool_name: str, **kwargs: Any):
        super().__init__(
            f"Tool already registered: {tool_name}", "DUPLICATE_TOOL", tool_name=tool_name, **kwargs
        )


class InvalidSchemaError(ToolRegistrationError):
    """Raised when an input schema is not a JSON object."""

    error_code = "INVALID_SCHEMA"

    def __init__(self, message: str = "Schema must be an object", **kwargs: Any):
        super().__init__(message, "INVALID_SCHEMA", **kwargs)


class ToolNotFoundError(ToolRouterError):
    """Raised when no route (or no dynamic route) matches a tool name."""

    error_code = "TOOL_NOT_FOUND"

    def __init__(self, tool_name: str, **kwargs: Any):
        super().__init__(
            f"tool not found: {tool_name}", "TOOL_NOT_FOUND", tool_name=tool_name, **kwargs
        )


__all__ = [
    "ToolRouterError",
    "ToolRegistrationError",
    "InvalidNameError",
    "DuplicateToolError",
    "InvalidSchemaError",
    "ToolNotFoundError",
]
