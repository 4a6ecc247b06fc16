"""File write tool — writes content to a workspace file."""

import os

from tools.base_tool import Tool
from agent.exceptions import ToolExecutionError
from agent.response import ToolResult


class FileWriteTool(Tool):
    name = "file_write"
    description = (
        "Write file contents. Use when: applying focused edits, scaffolding files. "
        "Arguments: {\"path\": \"<path relative to the workspace>\", \"content\": \"<text>\"}"
    )

    async def execute(self, arguments) -> ToolResult:
        path = self.require_str(arguments, "path")
        content = arguments.get("content")
        if not isinstance(content, str):
            raise ToolExecutionError("Missing 'content' parameter")

        full_path = self.resolve_path(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w", encoding="utf-8") as f:
            f.write(content)
        return ToolResult.ok(f"Wrote {len(content)} characters to {path}")
