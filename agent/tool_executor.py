"""Tool call execution and result formatting."""

from __future__ import annotations

from typing import Iterable

from agent.response import ToolCall, ToolResult
from tools.base_tool import Tool


async def execute_tool_call(tool_call: ToolCall, tools: Iterable[Tool]) -> ToolResult:
    """Run a tool call against the first tool with a matching name.

    Never raises for tool problems: an unknown name or an exception from
    the tool becomes a failed ToolResult so it can be fed back to the model.
    """
    tool = next((t for t in tools if t.name == tool_call.name), None)
    if tool is None:
        return ToolResult.failed(f"Tool '{tool_call.name}' not found")

    try:
        return await tool.execute(tool_call.arguments)
    except Exception as e:
        return ToolResult.failed(f"Tool execution failed: {e}")


def format_tool_result(tool_call: ToolCall, result: ToolResult) -> str:
    """Render a tool result as feedback text for the model."""
    if result.success:
        return f"Tool {tool_call.name} completed successfully:\nOutput: {result.output}"
    error = result.error if result.error is not None else "Unknown error"
    return f"Tool {tool_call.name} failed:\nError: {error}"
