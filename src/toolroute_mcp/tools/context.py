"""Per-call context handed to the router by the caller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

S = TypeVar("S")


@dataclass(frozen=True)
class ToolCallContext(Generic[S]):
    """Target tool name, shared service state and raw arguments for one call.

    The router reads these three fields and nothing else. ``service`` is
    borrowed from the caller; the router never stores the context.
    """

    name: str
    service: S
    arguments: dict[str, Any] | None = None
