"""Tool descriptors — immutable metadata for a single tool."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any

from mcp.types import Tool, ToolAnnotations

from .schema import empty_object_schema, schema_for_type


@dataclass(frozen=True)
class ToolDescriptor:
    """Name, description, input schema and annotations of one tool.

    Descriptors are never mutated in place; the ``with_*`` helpers return a
    new descriptor and updating a registered tool means replacing its route.
    """

    name: str
    description: str | None = None
    input_schema: dict[str, Any] = field(default_factory=empty_object_schema)
    annotations: ToolAnnotations | None = None

    @classmethod
    def new(
        cls,
        name: str,
        description: str | None,
        input_schema: dict[str, Any],
        annotations: ToolAnnotations | None = None,
    ) -> ToolDescriptor:
        """Build a descriptor from a static declaration (schema trusted as-is)."""
        return cls(
            name=name,
            description=description,
            input_schema=input_schema,
            annotations=annotations,
        )

    @classmethod
    def for_type(
        cls,
        name: str,
        tp: Any,
        description: str | None = None,
        annotations: ToolAnnotations | None = None,
    ) -> ToolDescriptor:
        """Build a descriptor whose input schema is generated from ``tp``."""
        return cls(
            name=name,
            description=description,
            input_schema=schema_for_type(tp),
            annotations=annotations,
        )

    def with_description(self, description: str | None) -> ToolDescriptor:
        return replace(self, description=description)

    def with_input_schema(self, input_schema: dict[str, Any]) -> ToolDescriptor:
        return replace(self, input_schema=input_schema)

    def with_annotations(self, annotations: ToolAnnotations | None) -> ToolDescriptor:
        return replace(self, annotations=annotations)

    def copy(self) -> ToolDescriptor:
        """Return a value copy that shares no mutable state with ``self``."""
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            input_schema=copy.deepcopy(self.input_schema),
            annotations=self.annotations.model_copy() if self.annotations else None,
        )

    def to_mcp_tool(self) -> Tool:
        """Convert to the protocol's tool listing entry."""
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=copy.deepcopy(self.input_schema),
            annotations=self.annotations,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serialisable dict."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": copy.deepcopy(self.input_schema),
            "annotations": (
                self.annotations.model_dump(exclude_none=True) if self.annotations else None
            ),
        }
