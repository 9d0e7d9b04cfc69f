"""Invocation erasure — one async call signature for every handler shape.

Typed tools are plain Python callables whose arguments are decoded with
pydantic before the call. Dynamic tools are ``DynamicToolHandler`` objects
that receive the service and the raw argument object untouched. Both are
wrapped in a frozen adapter implementing ``ErasedToolCall``.
"""

from __future__ import annotations

import inspect
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar, get_origin, get_type_hints, runtime_checkable

from mcp.shared.exceptions import McpError
from mcp.types import (
    INVALID_PARAMS,
    AudioContent,
    CallToolResult,
    EmbeddedResource,
    ErrorData,
    ImageContent,
    ResourceLink,
    TextContent,
)
from pydantic import BaseModel, TypeAdapter, ValidationError, create_model

from .context import ToolCallContext
from .schema import schema_for_type

S_contra = TypeVar("S_contra", contravariant=True)

ErasedToolCall = Callable[[ToolCallContext[Any]], Awaitable[CallToolResult]]

_CONTENT_TYPES = (TextContent, ImageContent, AudioContent, ResourceLink, EmbeddedResource)


@runtime_checkable
class DynamicToolHandler(Protocol[S_contra]):
    """Logic for a tool registered at run time.

    ``call`` receives the service state and the raw argument object (or
    ``None``) and returns an awaitable ``CallToolResult``. Implementations
    are shared between concurrent calls and must not keep per-call state.
    """

    def call(
        self, service: S_contra, params: dict[str, Any] | None
    ) -> Awaitable[CallToolResult]: ...


@dataclass(frozen=True)
class FunctionToolHandler:
    """Adapts a ``fn(service, params)`` callable (sync or async) to ``DynamicToolHandler``."""

    fn: Callable[[Any, dict[str, Any] | None], Any]

    async def call(self, service: Any, params: dict[str, Any] | None) -> CallToolResult:
        result = self.fn(service, params)
        if inspect.isawaitable(result):
            result = await result
        return into_call_tool_result(result)


# ---------------------------------------------------------------------------
# Result helpers
# ---------------------------------------------------------------------------


def text_result(text: str) -> CallToolResult:
    """Successful result holding a single text item."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


def error_result(text: str) -> CallToolResult:
    """Tool-level failure reported inside a result (``isError`` set)."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=True)


def into_call_tool_result(value: Any) -> CallToolResult:
    """Normalize a typed handler's return value into a ``CallToolResult``.

    - ``CallToolResult`` -> unchanged
    - ``None`` -> success with no content
    - ``str`` -> one text item
    - content block -> one item
    - list/tuple of content blocks -> those items, in order
    - dict / pydantic model -> JSON text item plus structured content
    - anything else -> JSON (or ``str``) text item
    """
    if isinstance(value, CallToolResult):
        return value
    if value is None:
        return CallToolResult(content=[], isError=False)
    if isinstance(value, str):
        return text_result(value)
    if isinstance(value, _CONTENT_TYPES):
        return CallToolResult(content=[value], isError=False)
    if isinstance(value, (list, tuple)) and all(isinstance(v, _CONTENT_TYPES) for v in value):
        return CallToolResult(content=list(value), isError=False)
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    if isinstance(value, dict):
        return CallToolResult(
            content=[TextContent(type="text", text=json.dumps(value, default=str))],
            structuredContent=value,
            isError=False,
        )
    try:
        text = json.dumps(value, default=str)
    except (TypeError, ValueError):
        text = str(value)
    return text_result(text)


# ---------------------------------------------------------------------------
# Argument extraction
# ---------------------------------------------------------------------------


class ArgumentExtractor(Protocol):
    """Turns a call context into positional and keyword arguments."""

    def extract(self, context: ToolCallContext[Any]) -> tuple[tuple[Any, ...], dict[str, Any]]: ...

    def input_schema(self) -> dict[str, Any]: ...


def _invalid_params(exc: ValidationError) -> McpError:
    details = [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in exc.errors()
    ]
    return McpError(
        ErrorData(
            code=INVALID_PARAMS,
            message=f"failed to deserialize parameters: {exc.error_count()} validation error(s)",
            data=details,
        )
    )


def _is_context_type(hint: Any) -> bool:
    return hint is ToolCallContext or get_origin(hint) is ToolCallContext


@dataclass(frozen=True)
class ModelArguments:
    """Decode the whole argument object into ``tp`` and pass it positionally.

    With ``pass_context`` the call context is passed first:
    ``fn(context, params)``.
    """

    tp: Any
    pass_context: bool = False
    _adapter: TypeAdapter[Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_adapter", TypeAdapter(self.tp))

    def extract(self, context: ToolCallContext[Any]) -> tuple[tuple[Any, ...], dict[str, Any]]:
        try:
            params = self._adapter.validate_python(context.arguments or {})
        except ValidationError as e:
            raise _invalid_params(e) from e
        if self.pass_context:
            return (context, params), {}
        return (params,), {}

    def input_schema(self) -> dict[str, Any]:
        return schema_for_type(self.tp)


@dataclass(frozen=True)
class KeywordArguments:
    """Decode arguments against a model built from a function signature.

    Decoded fields are passed as keyword arguments. Parameters annotated
    with ``ToolCallContext`` are left out of the model and receive the
    context itself. Other parameters must not start with an underscore,
    since pydantic would treat them as private attributes.
    """

    model: type[BaseModel]
    context_params: tuple[str, ...] = ()

    @classmethod
    def from_signature(cls, fn: Callable[..., Any]) -> KeywordArguments:
        target = getattr(fn, "__func__", fn)
        hints = get_type_hints(target)
        fields: dict[str, Any] = {}
        context_params: list[str] = []
        for pname, param in inspect.signature(fn).parameters.items():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            hint = hints.get(pname, Any)
            if _is_context_type(hint):
                context_params.append(pname)
                continue
            if pname.startswith("_"):
                raise TypeError(
                    f"tool parameter {pname!r} of {fn.__name__} cannot start with an underscore"
                )
            default = ... if param.default is param.empty else param.default
            fields[pname] = (hint, default)
        name = "".join(part.title() for part in fn.__name__.split("_")) + "Arguments"
        return cls(model=create_model(name, **fields), context_params=tuple(context_params))

    def extract(self, context: ToolCallContext[Any]) -> tuple[tuple[Any, ...], dict[str, Any]]:
        try:
            validated = self.model.model_validate(context.arguments or {})
        except ValidationError as e:
            raise _invalid_params(e) from e
        kwargs = {name: getattr(validated, name) for name in self.model.model_fields}
        for pname in self.context_params:
            kwargs[pname] = context
        return (), kwargs

    def input_schema(self) -> dict[str, Any]:
        return schema_for_type(self.model)


# ---------------------------------------------------------------------------
# Erased adapters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TypedToolCall:
    """Typed-adapter path: decode, call, normalize."""

    fn: Callable[..., Any]
    extractor: ArgumentExtractor

    async def __call__(self, context: ToolCallContext[Any]) -> CallToolResult:
        args, kwargs = self.extractor.extract(context)
        result = self.fn(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return into_call_tool_result(result)


@dataclass(frozen=True)
class DynamicToolCall:
    """Dynamic-handler path: forward service and raw arguments unchanged."""

    handler: DynamicToolHandler[Any]

    async def __call__(self, context: ToolCallContext[Any]) -> CallToolResult:
        return await self.handler.call(context.service, context.arguments)
