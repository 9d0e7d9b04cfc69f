"""Routes — a descriptor bound to an erased call — and static declarations."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar, get_origin, get_type_hints

from mcp.types import CallToolResult, ToolAnnotations

from .context import ToolCallContext
from .descriptor import ToolDescriptor
from .handler import (
    ArgumentExtractor,
    ErasedToolCall,
    KeywordArguments,
    ModelArguments,
    TypedToolCall,
)
from .schema import empty_object_schema, ensure_object, schema_for_type

S = TypeVar("S")

# Attribute set on functions marked with @tool
TOOL_ATTR = "__toolroute_spec__"


@dataclass(frozen=True)
class ToolRoute(Generic[S]):
    """One registry entry: descriptor, erased call and provenance.

    ``call`` is shared by every copy of the route and by concurrent
    invocations; it must not hold per-call state.
    """

    descriptor: ToolDescriptor
    call: ErasedToolCall
    dynamic: bool = False

    @classmethod
    def new(
        cls,
        descriptor: ToolDescriptor,
        fn: Callable[..., Any],
        extractor: ArgumentExtractor | None = None,
    ) -> ToolRoute[S]:
        """Bind a typed callable; arguments are decoded from its signature by default."""
        if extractor is None:
            extractor = KeywordArguments.from_signature(fn)
        return cls(descriptor=descriptor, call=TypedToolCall(fn, extractor))

    @classmethod
    def new_dyn(cls, descriptor: ToolDescriptor, call: ErasedToolCall) -> ToolRoute[S]:
        """Bind an already-erased call."""
        return cls(descriptor=descriptor, call=call)

    @classmethod
    def from_function(
        cls,
        fn: Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
        annotations: ToolAnnotations | None = None,
    ) -> ToolRoute[S]:
        """Describe and bind ``fn``; the schema comes from its signature."""
        extractor = KeywordArguments.from_signature(fn)
        descriptor = ToolDescriptor(
            name=name or fn.__name__,
            description=description if description is not None else inspect.getdoc(fn),
            input_schema=extractor.input_schema(),
            annotations=annotations,
        )
        return cls(descriptor=descriptor, call=TypedToolCall(fn, extractor))

    @property
    def name(self) -> str:
        return self.descriptor.name

    async def invoke(self, context: ToolCallContext[S]) -> CallToolResult:
        return await self.call(context)

    def copy(self) -> ToolRoute[S]:
        """Value-copy the descriptor; the call is shared."""
        return replace(self, descriptor=self.descriptor.copy())


class ToolBuilder:
    """Chainable declaration of a typed tool.

    ::

        route = (
            tool_attr(add, "add")
            .description("Add two numbers")
            .parameters(AddRequest)
            .build()
        )

    ``parameters`` switches argument decoding to the given type (the whole
    argument object is decoded and passed positionally). Without it the
    function signature decides.
    """

    def __init__(self, fn: Callable[..., Any], name: str):
        self.fn = fn
        self.attr = ToolDescriptor(name=name, description="", input_schema=empty_object_schema())
        self.extractor: ArgumentExtractor | None = None

    def description(self, description: str) -> ToolBuilder:
        self.attr = self.attr.with_description(description)
        return self

    def parameters(self, tp: Any, pass_context: bool = False) -> ToolBuilder:
        self.attr = self.attr.with_input_schema(schema_for_type(tp))
        self.extractor = ModelArguments(tp, pass_context=pass_context)
        return self

    def parameters_value(self, schema: Any) -> ToolBuilder:
        """Set a raw schema; raises ``InvalidSchemaError`` if it is not an object."""
        self.attr = self.attr.with_input_schema(ensure_object(schema))
        return self

    def annotation(self, annotations: ToolAnnotations) -> ToolBuilder:
        self.attr = self.attr.with_annotations(annotations)
        return self

    def build(self) -> ToolRoute[Any]:
        extractor = self.extractor or KeywordArguments.from_signature(self.fn)
        return ToolRoute(descriptor=self.attr, call=TypedToolCall(self.fn, extractor))


def tool_attr(fn: Callable[..., Any], name: str) -> ToolBuilder:
    """Start a ``ToolBuilder`` for ``fn`` under ``name``."""
    return ToolBuilder(fn, name)


@dataclass(frozen=True)
class ToolDeclaration:
    """Metadata left on a function by ``@tool``."""

    name: str | None
    description: str | None
    annotations: ToolAnnotations | None


def tool(
    name: str | None = None,
    description: str | None = None,
    annotations: ToolAnnotations | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a function (or method) as a static tool declaration.

    The function is returned unchanged so it stays directly callable;
    ``into_tool_route`` and ``ToolRouter.from_object`` turn it into a route.
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        setattr(fn, TOOL_ATTR, ToolDeclaration(name, description, annotations))
        return fn

    return decorator


def route_for_declared(fn: Callable[..., Any]) -> ToolRoute[Any]:
    """Build the route for a ``@tool``-marked function or bound method."""
    decl: ToolDeclaration = getattr(fn, TOOL_ATTR)
    return ToolRoute.from_function(
        fn, name=decl.name, description=decl.description, annotations=decl.annotations
    )


def _is_route_factory(item: Any) -> bool:
    """A zero-argument callable whose return annotation is ``ToolRoute``."""
    try:
        inspect.signature(item).bind()
        returns = get_type_hints(getattr(item, "__func__", item)).get("return")
    except (TypeError, ValueError, NameError):
        return False
    return returns is ToolRoute or get_origin(returns) is ToolRoute


def into_tool_route(item: Any) -> ToolRoute[Any]:
    """Convert any supported route source into a ``ToolRoute``.

    Accepts a route, a ``ToolBuilder``, a ``(descriptor, callable)`` pair,
    a ``@tool``-marked callable, or a zero-argument factory annotated as
    returning ``ToolRoute``. Other callables are rejected without being called.
    """
    if isinstance(item, ToolRoute):
        return item
    if isinstance(item, ToolBuilder):
        return item.build()
    if isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], ToolDescriptor):
        return ToolRoute.new(item[0], item[1])
    if callable(item) and hasattr(item, TOOL_ATTR):
        return route_for_declared(item)
    if callable(item) and _is_route_factory(item):
        route = item()
        if isinstance(route, ToolRoute):
            return route
        raise TypeError(f"route factory {item!r} returned {type(route).__name__}")
    raise TypeError(f"cannot convert {type(item).__name__} into a tool route")
