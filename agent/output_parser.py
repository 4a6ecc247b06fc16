"""Format-tolerant parser for extracting tool calls from LLM output."""

from __future__ import annotations

import json
import re
from typing import Callable

from agent.log import build_file_logger
from agent.response import StructuredValue, ToolCall

TOOL_CALLS_FENCE = "```tool_calls"
JSON_FENCE = "```json"
FENCE_CLOSE = "```"
TOOL_USE_TYPE = "tool_use"

# name({...}) | name([...]) | name(anything-but-close-paren)
_INLINE_CALL_RE = re.compile(
    r"\b(\w+)\s*\((\{.*?\})\)|\b(\w+)\s*\((\[.*?\])\)|\b(\w+)\s*\(([^)]+)\)"
)

_MISSING = object()

Strategy = Callable[[str], "list[ToolCall]"]


def _load_json(text: str) -> object:
    """Parse JSON text, returning ``_MISSING`` when it is not valid JSON."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return _MISSING


def extract_calls_from_value(value: StructuredValue) -> list[ToolCall]:
    """Convert a decoded JSON value (object or array of objects) into tool calls."""
    if isinstance(value, list):
        calls = []
        for item in value:
            call = extract_single_call(item)
            if call is not None:
                calls.append(call)
        return calls

    call = extract_single_call(value)
    return [call] if call is not None else []


def extract_single_call(value: StructuredValue) -> ToolCall | None:
    """Recognize one tool call in function, tool_use, or generic shape."""
    if not isinstance(value, dict):
        return None

    # {"function": {"name": ..., "arguments": ...}}
    if "function" in value:
        function = value["function"]
        if not isinstance(function, dict):
            return None
        return _make_call(function.get("name"), function.get("arguments", {}))

    # {"type": "tool_use", "name": ..., "input": ...}
    if value.get("type") == TOOL_USE_TYPE:
        return _make_call(value.get("name"), value.get("input", {}))

    # {"name" | "tool": ..., "arguments" | "args" | "input" | "params": ...}
    name = value["name"] if "name" in value else value.get("tool")
    if not isinstance(name, str):
        return None
    arguments: StructuredValue = {}
    for key in ("arguments", "args", "input", "params"):
        if key in value:
            arguments = value[key]
            break
    return _make_call(name, arguments)


def _make_call(name: object, arguments: StructuredValue) -> ToolCall | None:
    if not isinstance(name, str) or not name:
        return None
    return ToolCall(name=name, arguments=arguments)


def _fenced_block(text: str, marker: str) -> str | None:
    """Return the body of the first fence opened by ``marker``, or None."""
    start = text.find(marker)
    if start == -1:
        return None
    newline = text.find("\n", start)
    body_start = newline + 1 if newline != -1 else start + len(marker)
    end = text.find(FENCE_CLOSE, body_start)
    if end == -1:
        return None
    return text[body_start:end].strip()


def _calls_from_fence(text: str, marker: str) -> list[ToolCall]:
    block = _fenced_block(text, marker)
    if block is None:
        return []
    value = _load_json(block)
    if value is _MISSING:
        return []
    return extract_calls_from_value(value)


def extract_from_tool_calls_fence(text: str) -> list[ToolCall]:
    """Strategy 1: a ```tool_calls fenced block."""
    return _calls_from_fence(text, TOOL_CALLS_FENCE)


def extract_from_json_fence(text: str) -> list[ToolCall]:
    """Strategy 2: a ```json fenced block."""
    return _calls_from_fence(text, JSON_FENCE)


def extract_from_whole_response(text: str) -> list[ToolCall]:
    """Strategy 3: the entire response is a JSON document."""
    value = _load_json(text.strip())
    if value is _MISSING:
        return []
    return extract_calls_from_value(value)


def extract_inline_calls(text: str) -> list[ToolCall]:
    """Strategy 4: ``name(<json>)`` occurrences anywhere in the text."""
    calls: list[ToolCall] = []
    for match in _INLINE_CALL_RE.finditer(text):
        name = match.group(1) or match.group(3) or match.group(5)
        args_text = match.group(2) or match.group(4) or match.group(6)
        arguments = _load_json(args_text)
        if arguments is _MISSING:
            continue
        calls.append(ToolCall(name=name, arguments=arguments))
    return calls


class OutputParser:
    """Extract tool calls from raw LLM output, trying strategies in priority order.

    The first strategy that yields at least one call wins; results from
    lower-priority strategies are never merged in. Parsing never raises:
    text without any recognizable call yields an empty list, which the
    caller treats as a final answer.
    """

    strategies: list[tuple[str, Strategy]] = [
        ("tool_calls_fence", extract_from_tool_calls_fence),
        ("json_fence", extract_from_json_fence),
        ("whole_response", extract_from_whole_response),
        ("inline_call", extract_inline_calls),
    ]

    def __init__(self, log_dir: str | None = None):
        self._logger = build_file_logger(__name__, log_dir, "output_parser.log")

    def parse(self, raw_text: str) -> list[ToolCall]:
        """Extract all tool calls from raw text."""
        for strategy_name, strategy in self.strategies:
            calls = strategy(raw_text)
            if calls:
                self._logger.debug(
                    "Parsed %d tool call(s) via %s: %s",
                    len(calls),
                    strategy_name,
                    ", ".join(call.name for call in calls),
                )
                return calls

        self._logger.debug("No tool calls found\nRAW_OUTPUT:\n%s\n", raw_text)
        return []


def parse_tool_calls(raw_text: str) -> list[ToolCall]:
    """Parse tool calls with a default parser."""
    return OutputParser().parse(raw_text)
