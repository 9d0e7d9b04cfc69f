"""Tests for the tool router registry and dispatch."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import pytest
from mcp.types import CallToolResult

from toolroute_mcp.exceptions import (
    DuplicateToolError,
    InvalidNameError,
    InvalidSchemaError,
    ToolNotFoundError,
)
from toolroute_mcp.tools import (
    FunctionToolHandler,
    ToolCallContext,
    ToolDescriptor,
    ToolRoute,
    ToolRouter,
    text_result,
    tool,
)

ECHO_SCHEMA = {"type": "object", "properties": {"message": {"type": "string"}}}
EMPTY_SCHEMA = {"type": "object", "properties": {}}


@dataclass
class Service:
    name: str


class EchoHandler:
    async def call(self, service: Service, params: dict[str, Any] | None) -> CallToolResult:
        message = (params or {}).get("message", "default")
        return text_result(message)


class ServiceNameHandler:
    async def call(self, service: Service, params: dict[str, Any] | None) -> CallToolResult:
        return text_result(f"Service: {service.name}")


class BoomError(Exception):
    pass


class FailingHandler:
    def __init__(self) -> None:
        self.error = BoomError("Intentional error")

    async def call(self, service: Service, params: dict[str, Any] | None) -> CallToolResult:
        raise self.error


def _static_route(name: str, text: str = "static") -> ToolRoute[Service]:
    def handler() -> str:
        return text

    return ToolRoute.new(ToolDescriptor.new(name, "static tool", dict(EMPTY_SCHEMA)), handler)


def _dispatch(router: ToolRouter[Service], name: str, arguments: dict[str, Any] | None = None):
    context = ToolCallContext(name=name, service=Service("svc"), arguments=arguments)
    return asyncio.run(router.dispatch(context))


def _text(result: CallToolResult) -> str:
    return result.content[0].text  # type: ignore[union-attr]


def _assert_invariants(router: ToolRouter[Any]) -> None:
    assert set(router.dynamic_names()) <= set(router.names())
    assert router.static_count() + router.dynamic_count() == len(router.names())


class TestRegisterDynamic:
    def test_register_success(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", "Echo a message", ECHO_SCHEMA, EchoHandler())

        assert router.exists("echo")
        assert "echo" in router.dynamic_names()
        assert router.dynamic_count() == 1
        assert router.static_count() == 0
        _assert_invariants(router)

    def test_echo_dispatch(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", "Echo a message", ECHO_SCHEMA, EchoHandler())

        result = _dispatch(router, "echo", {"message": "hi"})
        assert _text(result) == "hi"
        assert result.isError is False

    def test_duplicate_fails(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", "Echo tool", EMPTY_SCHEMA, EchoHandler())

        with pytest.raises(DuplicateToolError) as exc_info:
            router.register_dynamic("echo", "Echo tool", EMPTY_SCHEMA, EchoHandler())
        assert exc_info.value.tool_name == "echo"
        assert router.dynamic_count() == 1

    def test_duplicate_of_static_fails(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register(_static_route("echo"))

        with pytest.raises(DuplicateToolError):
            router.register_dynamic("echo", None, EMPTY_SCHEMA, EchoHandler())
        assert router.static_count() == 1

    def test_empty_name_fails(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        with pytest.raises(InvalidNameError):
            router.register_dynamic("", "Tool", EMPTY_SCHEMA, EchoHandler())
        assert len(router) == 0

    def test_empty_name_checked_before_schema(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        with pytest.raises(InvalidNameError):
            router.register_dynamic("", None, "not an object", EchoHandler())

    @pytest.mark.parametrize("schema", ["not an object", 42, None, ["type", "object"]])
    def test_non_object_schema_fails(self, schema: Any) -> None:
        router: ToolRouter[Service] = ToolRouter()
        with pytest.raises(InvalidSchemaError):
            router.register_dynamic("test", "Test", schema, EchoHandler())
        assert not router.exists("test")

    def test_schema_is_copied(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        schema = {"type": "object", "properties": {}}
        router.register_dynamic("echo", None, schema, EchoHandler())
        schema["properties"]["late"] = {"type": "string"}

        assert router.list_tools()[0].input_schema == EMPTY_SCHEMA

    def test_description_kept(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", "Echo a message", ECHO_SCHEMA, EchoHandler())
        router.register_dynamic("bare", None, EMPTY_SCHEMA, EchoHandler())

        by_name = {d.name: d for d in router.list_tools()}
        assert by_name["echo"].description == "Echo a message"
        assert by_name["echo"].input_schema == ECHO_SCHEMA
        assert by_name["bare"].description is None

    def test_plain_callable_handler_is_wrapped(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic(
            "shout", None, EMPTY_SCHEMA, lambda service, params: f"{service.name}:{params}"
        )

        assert _text(_dispatch(router, "shout", {"x": 1})) == "svc:{'x': 1}"
        assert router.is_dynamic("shout")

    def test_non_callable_handler_rejected(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        with pytest.raises(TypeError):
            router.register_dynamic("broken", None, EMPTY_SCHEMA, object())
        assert not router.exists("broken")


class TestUnregister:
    def test_unregister_success(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", "Echo", EMPTY_SCHEMA, EchoHandler())

        router.unregister("echo")
        assert not router.exists("echo")
        assert "echo" not in router.dynamic_names()
        assert router.dynamic_count() == 0
        _assert_invariants(router)

    def test_unregister_unknown_fails(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        with pytest.raises(ToolNotFoundError) as exc_info:
            router.unregister("x")
        assert exc_info.value.tool_name == "x"

    def test_unregister_static_fails(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register(_static_route("fixed"))

        with pytest.raises(ToolNotFoundError):
            router.unregister("fixed")
        assert router.exists("fixed")

    def test_static_overwrite_of_dynamic_is_not_unregisterable(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("tool", None, EMPTY_SCHEMA, EchoHandler())
        router.register(_static_route("tool"))

        assert router.dynamic_count() == 0
        assert router.static_count() == 1
        with pytest.raises(ToolNotFoundError):
            router.unregister("tool")
        _assert_invariants(router)

    def test_multiple_tools(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        for i in range(5):
            router.register_dynamic(f"tool_{i}", f"Tool number {i}", EMPTY_SCHEMA, EchoHandler())
        assert router.dynamic_count() == 5

        router.unregister("tool_1")
        router.unregister("tool_3")

        assert router.dynamic_count() == 3
        assert router.exists("tool_0")
        assert not router.exists("tool_1")
        assert router.exists("tool_2")
        assert not router.exists("tool_3")
        assert router.exists("tool_4")
        _assert_invariants(router)

    def test_unregister_twice_fails(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", None, EMPTY_SCHEMA, EchoHandler())
        router.unregister("echo")
        with pytest.raises(ToolNotFoundError):
            router.unregister("echo")


class TestRemove:
    def test_remove_static(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register(_static_route("fixed"))
        router.remove("fixed")
        assert not router.exists("fixed")

    def test_remove_dynamic_clears_provenance(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", None, EMPTY_SCHEMA, EchoHandler())
        router.register(_static_route("fixed"))

        router.remove("echo")
        assert router.dynamic_count() == 0
        assert router.static_count() == 1
        _assert_invariants(router)

    def test_remove_absent_is_noop(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.remove("missing")
        assert len(router) == 0


class TestRegister:
    def test_register_overwrites(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register(_static_route("tool", "first"))
        router.register(_static_route("tool", "second"))

        assert len(router) == 1
        assert _text(_dispatch(router, "tool")) == "second"

    def test_with_route_chains(self) -> None:
        router: ToolRouter[Service] = (
            ToolRouter().with_route(_static_route("a")).with_route(_static_route("b"))
        )
        assert sorted(router.names()) == ["a", "b"]
        assert router.static_count() == 2

    def test_from_tools_accepts_declared_functions(self) -> None:
        @tool(description="Add two numbers")
        def add(a: int, b: int) -> int:
            return a + b

        router: ToolRouter[Service] = ToolRouter.from_tools(add, _static_route("other"))
        assert sorted(router.names()) == ["add", "other"]
        assert _text(_dispatch(router, "add", {"a": 2, "b": 3})) == "5"

    def test_from_object_collects_marked_methods(self) -> None:
        class Calculator:
            def __init__(self) -> None:
                self.offset = 10

            @tool(description="Add the offset")
            def shift(self, value: int) -> int:
                return value + self.offset

            def helper(self) -> None:
                pass

        router: ToolRouter[Service] = ToolRouter.from_object(Calculator())
        assert router.names() == ["shift"]
        assert _text(_dispatch(router, "shift", {"value": 1})) == "11"


class TestMerge:
    def test_merge_overwrites_and_carries_provenance(self) -> None:
        left: ToolRouter[Service] = ToolRouter()
        left.register(_static_route("shared", "left"))
        left.register_dynamic("only_left", None, EMPTY_SCHEMA, EchoHandler())

        right: ToolRouter[Service] = ToolRouter()
        right.register_dynamic("shared", None, EMPTY_SCHEMA, ServiceNameHandler())
        right.register(_static_route("only_right"))

        left.merge(right)

        assert sorted(left.names()) == ["only_left", "only_right", "shared"]
        assert sorted(left.dynamic_names()) == ["only_left", "shared"]
        assert _text(_dispatch(left, "shared")) == "Service: svc"
        assert len(right) == 0
        _assert_invariants(left)

    def test_merge_static_over_dynamic_clears_provenance(self) -> None:
        left: ToolRouter[Service] = ToolRouter()
        left.register_dynamic("shared", None, EMPTY_SCHEMA, EchoHandler())
        right: ToolRouter[Service] = ToolRouter()
        right.register(_static_route("shared"))

        left += right
        assert left.dynamic_count() == 0
        assert left.static_count() == 1

    def test_combine_is_pure(self) -> None:
        a: ToolRouter[Service] = ToolRouter()
        a.register(_static_route("x", "from a"))
        b: ToolRouter[Service] = ToolRouter()
        b.register_dynamic("x", None, EMPTY_SCHEMA, EchoHandler())
        b.register(_static_route("y"))

        combined = ToolRouter.combine(a, b)

        assert sorted(combined.names()) == ["x", "y"]
        assert combined.dynamic_names() == ["x"]
        assert a.names() == ["x"] and not a.is_dynamic("x")
        assert sorted(b.names()) == ["x", "y"]

    def test_add_operator(self) -> None:
        a: ToolRouter[Service] = ToolRouter().with_route(_static_route("a"))
        b: ToolRouter[Service] = ToolRouter().with_route(_static_route("b"))
        assert sorted((a + b).names()) == ["a", "b"]
        assert a.names() == ["a"]

    def test_grouping_does_not_change_result(self) -> None:
        def build() -> tuple[ToolRouter[Service], ...]:
            a: ToolRouter[Service] = ToolRouter().with_route(_static_route("t", "a"))
            b: ToolRouter[Service] = ToolRouter()
            b.register_dynamic("t", None, EMPTY_SCHEMA, ServiceNameHandler())
            c: ToolRouter[Service] = ToolRouter().with_route(_static_route("u", "c"))
            return a, b, c

        a, b, c = build()
        left_first = ToolRouter.combine(ToolRouter.combine(a, b), c)
        a, b, c = build()
        right_first = ToolRouter.combine(a, ToolRouter.combine(b, c))

        assert sorted(left_first.names()) == sorted(right_first.names())
        assert left_first.dynamic_names() == right_first.dynamic_names() == ["t"]
        assert _text(_dispatch(left_first, "t")) == _text(_dispatch(right_first, "t"))


class TestDispatch:
    def test_unknown_tool(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        with pytest.raises(ToolNotFoundError):
            _dispatch(router, "missing")

    def test_unknown_tool_in_populated_router(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        for i in range(20):
            router.register_dynamic(f"tool_{i}", None, EMPTY_SCHEMA, EchoHandler())
        with pytest.raises(ToolNotFoundError):
            _dispatch(router, "missing")

    def test_service_is_forwarded(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("whoami", None, EMPTY_SCHEMA, ServiceNameHandler())
        assert _text(_dispatch(router, "whoami")) == "Service: svc"

    def test_missing_arguments_forwarded_as_none(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", None, ECHO_SCHEMA, EchoHandler())
        assert _text(_dispatch(router, "echo")) == "default"

    def test_handler_error_passes_through_unchanged(self) -> None:
        handler = FailingHandler()
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("boom", None, EMPTY_SCHEMA, handler)

        with pytest.raises(BoomError) as exc_info:
            _dispatch(router, "boom")
        assert exc_info.value is handler.error

    def test_function_handler(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic(
            "count",
            None,
            EMPTY_SCHEMA,
            FunctionToolHandler(lambda service, params: len(params or {})),
        )
        assert _text(_dispatch(router, "count", {"a": 1, "b": 2})) == "2"

    def test_concurrent_dispatch(self) -> None:
        class SlowEcho:
            async def call(self, service: Service, params: dict[str, Any] | None) -> CallToolResult:
                await asyncio.sleep(0.01 * (params or {}).get("delay", 0))
                return text_result(str((params or {})["i"]))

        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("slow", None, EMPTY_SCHEMA, SlowEcho())
        service = Service("svc")

        async def run_all() -> list[CallToolResult]:
            calls = [
                router.dispatch(
                    ToolCallContext(name="slow", service=service, arguments={"i": i, "delay": 5 - i})
                )
                for i in range(5)
            ]
            return await asyncio.gather(*calls)

        results = asyncio.run(run_all())
        assert [_text(r) for r in results] == ["0", "1", "2", "3", "4"]


class TestQueries:
    def test_names_and_exists(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        assert not router.exists("echo")
        router.register_dynamic("tool1", None, EMPTY_SCHEMA, EchoHandler())
        router.register_dynamic("tool2", None, EMPTY_SCHEMA, EchoHandler())

        assert sorted(router.names()) == ["tool1", "tool2"]
        assert "tool1" in router
        assert len(router) == 2

    def test_counts(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        assert router.dynamic_count() == 0
        assert router.static_count() == 0

        router.register_dynamic("dynamic1", None, EMPTY_SCHEMA, EchoHandler())
        router.register_dynamic("dynamic2", None, EMPTY_SCHEMA, EchoHandler())
        router.register(_static_route("static1"))

        assert router.dynamic_count() == 2
        assert router.static_count() == 1
        _assert_invariants(router)

    def test_list_tools_returns_copies(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", None, ECHO_SCHEMA, EchoHandler())

        snapshot = router.list_tools()
        snapshot[0].input_schema["properties"].clear()

        assert router.list_tools()[0].input_schema == ECHO_SCHEMA

    def test_list_mcp_tools(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", "Echo", ECHO_SCHEMA, EchoHandler())

        (listed,) = router.list_mcp_tools()
        assert listed.name == "echo"
        assert listed.inputSchema == ECHO_SCHEMA

    def test_iteration_yields_routes(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register(_static_route("a"))
        assert [route.name for route in router] == ["a"]

    def test_full_lifecycle(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        assert router.names() == []

        router.register_dynamic("echo", "Echo a message", ECHO_SCHEMA, EchoHandler())
        tools = router.list_tools()
        assert len(tools) == 1
        assert tools[0].name == "echo"
        assert tools[0].description == "Echo a message"

        router.unregister("echo")
        assert not router.exists("echo")
        assert router.names() == []


class TestCopy:
    def test_copy_keeps_dynamic_tools(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", None, EMPTY_SCHEMA, EchoHandler())

        cloned = router.copy()
        assert cloned.exists("echo")
        assert cloned.dynamic_count() == 1
        assert router.dynamic_count() == 1

    def test_copy_shares_call_but_not_descriptor(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", None, ECHO_SCHEMA, EchoHandler())

        cloned = router.copy()
        original_route = router.get("echo")
        cloned_route = cloned.get("echo")
        assert original_route is not None and cloned_route is not None
        assert cloned_route.call is original_route.call
        assert cloned_route.descriptor.input_schema is not original_route.descriptor.input_schema

    def test_copy_is_independent(self) -> None:
        router: ToolRouter[Service] = ToolRouter()
        router.register_dynamic("echo", None, EMPTY_SCHEMA, EchoHandler())
        cloned = router.copy()
        cloned.unregister("echo")

        assert router.exists("echo")
        assert not cloned.exists("echo")
