"""Tool discovery and lookup registry."""

from __future__ import annotations

import importlib
import inspect
import logging
import os
from typing import TYPE_CHECKING, Iterator

from tools.base_tool import Tool

if TYPE_CHECKING:
    from agent.config import AgentConfig

logger = logging.getLogger(__name__)

_SKIPPED_MODULES = ("base_tool.py", "tool_registry.py", "__init__.py")


class ToolRegistry:
    """Ordered collection of tool instances with first-match lookup."""

    def __init__(self, config: "AgentConfig", tools: list[Tool] | None = None):
        self.config = config
        self._tools: list[Tool] = []
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> bool:
        """Add a tool instance. Returns False if the name is already taken."""
        if self.get_tool(tool.name) is not None:
            logger.warning("Tool name collision, keeping first: %s", tool.name)
            return False
        self._tools.append(tool)
        return True

    def discover_tools(self, tools_dir: str | None = None) -> None:
        """Scan the tools/ directory and register all Tool subclasses."""
        if tools_dir is None:
            tools_dir = os.path.dirname(os.path.abspath(__file__))

        for filename in sorted(os.listdir(tools_dir)):
            if not filename.endswith(".py") or filename.startswith("_") or filename in _SKIPPED_MODULES:
                continue

            module_name = f"tools.{filename[:-3]}"
            try:
                module = importlib.import_module(module_name)
            except Exception as e:
                logger.warning("Failed to load %s: %s", module_name, e)
                continue

            for _, obj in inspect.getmembers(module, inspect.isclass):
                if (
                    issubclass(obj, Tool)
                    and obj is not Tool
                    and obj.__module__ == module.__name__
                    and not inspect.isabstract(obj)
                    and obj.name
                ):
                    self.register(obj(self.config))

    def get_tool(self, name: str) -> Tool | None:
        """Return the first tool registered under ``name``."""
        for tool in self._tools:
            if tool.name == name:
                return tool
        return None

    def get_tool_descriptions(self) -> str:
        """Generate markdown listing of all tools for the system prompt."""
        return "\n".join(tool.get_prompt_description() for tool in self._tools)

    @property
    def tool_names(self) -> list[str]:
        """List registered tool names in registration order."""
        return [tool.name for tool in self._tools]

    @property
    def tools(self) -> list[Tool]:
        return list(self._tools)

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)
