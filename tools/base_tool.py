"""Abstract base class for all tools."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from agent.exceptions import ToolExecutionError
from agent.response import StructuredValue, ToolResult

if TYPE_CHECKING:
    from agent.config import AgentConfig


class Tool(ABC):
    """Base class for all agent tools. Subclass this to create new tools."""

    name: str = ""
    description: str = ""

    def __init__(self, config: "AgentConfig"):
        self.config = config

    @abstractmethod
    async def execute(self, arguments: StructuredValue) -> ToolResult:
        """Execute the tool. Raise to signal a failure the caller should report."""
        ...

    def get_prompt_description(self) -> str:
        """Return the prompt description for this tool."""
        return f"### {self.name}\n{self.description}\n"

    # ── Argument helpers ─────────────────────────────────────────────

    def require_str(self, arguments: StructuredValue, key: str) -> str:
        """Fetch a required non-empty string argument."""
        if not isinstance(arguments, dict):
            raise ToolExecutionError(f"{self.name} expects an object of arguments")
        value = arguments.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ToolExecutionError(f"Missing '{key}' parameter")
        return value

    def resolve_path(self, path: str) -> str:
        """Resolve a path inside the workspace, rejecting escapes."""
        workspace = os.path.realpath(self.config.workspace_dir)
        full_path = os.path.realpath(os.path.join(workspace, path))
        if os.path.commonpath([workspace, full_path]) != workspace:
            raise ToolExecutionError(f"Path '{path}' is outside the workspace")
        return full_path
