"""File read tool — returns the contents of a workspace file."""

import os

from tools.base_tool import Tool
from agent.exceptions import ToolExecutionError
from agent.response import ToolResult


class FileReadTool(Tool):
    name = "file_read"
    description = (
        "Read file contents. Use when: inspecting project files, configs, logs. "
        "Arguments: {\"path\": \"<path relative to the workspace>\"}"
    )

    async def execute(self, arguments) -> ToolResult:
        path = self.require_str(arguments, "path")
        full_path = self.resolve_path(path)
        if not os.path.isfile(full_path):
            raise ToolExecutionError(f"File not found: {path}")

        with open(full_path, "r", encoding="utf-8", errors="replace") as f:
            return ToolResult.ok(f.read())
