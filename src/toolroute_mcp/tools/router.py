"""Tool router — name to route registry and call dispatch.

Routes are registered either statically (trusted declarations, typically
at start-up) or dynamically at run time through ``register_dynamic``,
which validates the name and schema and marks the entry as dynamic. Only
dynamic entries can be removed through ``unregister``.

The router does no locking. Mutate it while configuring, then share it for
concurrent ``dispatch`` calls; dispatch only reads the mapping.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar

from mcp.types import CallToolResult, Tool

from ..exceptions import DuplicateToolError, InvalidNameError, ToolNotFoundError
from ..logging_config import create_logger
from .context import ToolCallContext
from .descriptor import ToolDescriptor
from .handler import DynamicToolCall, DynamicToolHandler, FunctionToolHandler
from .route import TOOL_ATTR, ToolRoute, into_tool_route, route_for_declared
from .schema import ensure_object

logger = create_logger(__name__)

S = TypeVar("S")


class ToolRouter(Generic[S]):
    """Registry of tool routes keyed by tool name."""

    def __init__(self) -> None:
        self._routes: dict[str, ToolRoute[S]] = {}

    def __repr__(self) -> str:
        return (
            f"ToolRouter(static={self.static_count()}, dynamic={self.dynamic_count()}, "
            f"names={sorted(self._routes)!r})"
        )

    # -- construction -------------------------------------------------------

    @classmethod
    def from_tools(cls, *items: Any) -> ToolRouter[S]:
        """Build a router from anything ``into_tool_route`` accepts."""
        router: ToolRouter[S] = cls()
        for item in items:
            router.with_route(item)
        return router

    @classmethod
    def from_object(cls, obj: Any) -> ToolRouter[S]:
        """Collect every ``@tool``-marked method of ``obj`` as a static route."""
        router: ToolRouter[S] = cls()
        for attr_name, member in inspect.getmembers(type(obj)):
            func = getattr(member, "__func__", member)
            if attr_name.startswith("__") or not hasattr(func, TOOL_ATTR):
                continue
            router.register(route_for_declared(getattr(obj, attr_name)))
        return router

    def with_route(self, item: Any) -> ToolRouter[S]:
        """Register ``item`` and return ``self`` for chaining."""
        self.register(into_tool_route(item))
        return self

    def copy(self) -> ToolRouter[S]:
        """Copy the registry; descriptors are copied, calls are shared."""
        clone: ToolRouter[S] = type(self)()
        clone._routes = {name: route.copy() for name, route in self._routes.items()}
        return clone

    # -- mutation -----------------------------------------------------------

    def register(self, route: ToolRoute[S]) -> None:
        """Insert ``route``, replacing any route with the same name.

        Provenance follows the incoming route: a static route replacing a
        dynamic one makes the name static.
        """
        self._routes[route.name] = route
        logger.debug("Registered tool %s (dynamic=%s)", route.name, route.dynamic)

    def register_dynamic(
        self,
        name: str,
        description: str | None,
        input_schema: Any,
        handler: DynamicToolHandler[S] | Callable[[S, dict[str, Any] | None], Any],
    ) -> None:
        """Register a tool at run time.

        Args:
            name: Unique, non-empty tool name.
            description: Optional human-readable description.
            input_schema: JSON schema for the arguments; must be an object.
            handler: Shared handler invoked with the service and raw arguments.
                A plain ``fn(service, params)`` callable is wrapped in
                ``FunctionToolHandler``.

        Raises:
            InvalidNameError: ``name`` is empty.
            DuplicateToolError: a tool named ``name`` already exists.
            InvalidSchemaError: ``input_schema`` is not a JSON object.
            TypeError: ``handler`` is neither a handler nor a callable.
        """
        if not name:
            raise InvalidNameError()
        if name in self._routes:
            raise DuplicateToolError(name)
        schema = ensure_object(input_schema)
        if not isinstance(handler, DynamicToolHandler):
            if not callable(handler):
                raise TypeError(f"dynamic handler for {name} must define call() or be callable")
            handler = FunctionToolHandler(handler)

        descriptor = ToolDescriptor.new(name, description, schema)
        self._routes[name] = ToolRoute(
            descriptor=descriptor, call=DynamicToolCall(handler), dynamic=True
        )
        logger.debug("Registered dynamic tool %s", name)

    def unregister(self, name: str) -> None:
        """Remove a dynamically registered tool.

        Raises:
            ToolNotFoundError: ``name`` is absent or names a static tool.
        """
        route = self._routes.get(name)
        if route is None or not route.dynamic:
            raise ToolNotFoundError(name)
        del self._routes[name]
        logger.debug("Unregistered dynamic tool %s", name)

    def remove(self, name: str) -> None:
        """Remove ``name`` whatever its provenance; absent names are ignored."""
        if self._routes.pop(name, None) is not None:
            logger.debug("Removed tool %s", name)

    def merge(self, other: ToolRouter[S]) -> None:
        """Absorb ``other``; its entries win on name collisions.

        ``other`` is consumed and left empty.
        """
        incoming, other._routes = other._routes, {}
        self._routes.update(incoming)
        logger.debug("Merged %d tool(s)", len(incoming))

    @classmethod
    def combine(cls, a: ToolRouter[S], b: ToolRouter[S]) -> ToolRouter[S]:
        """Return a new router: ``a`` overlaid with ``b``. Inputs are untouched."""
        result = a.copy()
        result.merge(b.copy())
        return result

    def __add__(self, other: ToolRouter[S]) -> ToolRouter[S]:
        if not isinstance(other, ToolRouter):
            return NotImplemented
        return ToolRouter.combine(self, other)

    def __iadd__(self, other: ToolRouter[S]) -> ToolRouter[S]:
        if not isinstance(other, ToolRouter):
            return NotImplemented
        self.merge(other)
        return self

    # -- dispatch -----------------------------------------------------------

    async def dispatch(self, context: ToolCallContext[S]) -> CallToolResult:
        """Invoke the route named by ``context.name``.

        Handler exceptions propagate unchanged.

        Raises:
            ToolNotFoundError: no route matches ``context.name``.
        """
        route = self._routes.get(context.name)
        if route is None:
            raise ToolNotFoundError(context.name)
        return await route.call(context)

    # -- queries ------------------------------------------------------------

    def get(self, name: str) -> ToolRoute[S] | None:
        return self._routes.get(name)

    def list_tools(self) -> list[ToolDescriptor]:
        """Snapshot of every descriptor (copies; order unspecified)."""
        return [route.descriptor.copy() for route in self._routes.values()]

    def list_mcp_tools(self) -> list[Tool]:
        return [route.descriptor.to_mcp_tool() for route in self._routes.values()]

    def exists(self, name: str) -> bool:
        return name in self._routes

    def names(self) -> list[str]:
        return list(self._routes)

    def dynamic_names(self) -> list[str]:
        return [name for name, route in self._routes.items() if route.dynamic]

    def dynamic_count(self) -> int:
        """Number of tools registered through ``register_dynamic``."""
        return sum(1 for route in self._routes.values() if route.dynamic)

    def static_count(self) -> int:
        """Number of statically registered tools."""
        return len(self._routes) - self.dynamic_count()

    def is_dynamic(self, name: str) -> bool:
        route = self._routes.get(name)
        return route is not None and route.dynamic

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    def __iter__(self) -> Iterator[ToolRoute[S]]:
        return iter(list(self._routes.values()))
