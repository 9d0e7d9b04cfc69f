"""JSON schema helpers: generation from Python types and the object check."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, TypeAdapter

from ..exceptions import InvalidSchemaError


@lru_cache(maxsize=256)
def _cached_schema(tp: Any) -> dict[str, Any]:
    if isinstance(tp, type) and issubclass(tp, BaseModel):
        return tp.model_json_schema()
    return TypeAdapter(tp).json_schema()


def _root_type(schema: dict[str, Any]) -> Any:
    """Type of the schema root, following a root ``#/$defs/...`` reference."""
    ref = schema.get("$ref")
    if "type" not in schema and isinstance(ref, str) and ref.startswith("#/$defs/"):
        target = schema.get("$defs", {}).get(ref[len("#/$defs/"):], {})
        return target.get("type")
    return schema.get("type")


def schema_for_type(tp: Any) -> dict[str, Any]:
    """Generate the JSON schema describing ``tp``.

    Schemas are cached per type; every call returns a fresh copy. Recursive
    models put a ``$ref`` at the root; the referenced definition decides.

    Raises:
        InvalidSchemaError: If the schema root does not describe an object.
    """
    schema = _cached_schema(tp)
    root_type = _root_type(schema)
    if root_type != "object":
        raise InvalidSchemaError(
            f"Schema for {getattr(tp, '__name__', tp)!s} must describe an object, "
            f"got type {root_type!r}"
        )
    return copy.deepcopy(schema)


def empty_object_schema() -> dict[str, Any]:
    """Schema for a tool that takes no parameters."""
    return {"type": "object", "properties": {}}


def ensure_object(value: Any) -> dict[str, Any]:
    """Return ``value`` as a JSON object (a copied dict) or raise.

    Only the shape is checked; JSON-schema keywords are not validated.
    """
    if not isinstance(value, Mapping):
        raise InvalidSchemaError(
            "Schema must be an object", received_type=type(value).__name__
        )
    return copy.deepcopy(dict(value))
