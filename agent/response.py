"""ToolCall and ToolResult dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

# JSON-compatible value used for tool arguments.
StructuredValue = Union[
    None, bool, int, float, str, list["StructuredValue"], dict[str, "StructuredValue"]
]


@dataclass(frozen=True)
class ToolCall:
    """Parsed tool invocation from LLM output."""
    name: str
    arguments: StructuredValue = field(default_factory=dict)


@dataclass
class ToolResult:
    """Outcome of a tool execution."""
    success: bool
    output: str = ""
    error: str | None = None

    @classmethod
    def ok(cls, output: str) -> "ToolResult":
        return cls(success=True, output=output)

    @classmethod
    def failed(cls, error: str, output: str = "") -> "ToolResult":
        return cls(success=False, output=output, error=error)
