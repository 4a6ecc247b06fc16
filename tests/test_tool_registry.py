import unittest

from agent.config import AgentConfig
from agent.response import ToolResult
from tools.base_tool import Tool
from tools.tool_registry import ToolRegistry


class DummyTool(Tool):
    name = "dummy"
    description = "Does nothing."

    async def execute(self, arguments) -> ToolResult:
        return ToolResult.ok("")


class TestToolRegistry(unittest.TestCase):
    def setUp(self):
        self.config = AgentConfig()

    def test_discovers_builtin_tools_in_file_order(self):
        registry = ToolRegistry(self.config)
        registry.discover_tools()
        self.assertEqual(registry.tool_names, ["file_read", "file_write", "shell"])
        self.assertEqual(len(registry), 3)

    def test_register_and_lookup(self):
        tool = DummyTool(self.config)
        registry = ToolRegistry(self.config, [tool])
        self.assertIs(registry.get_tool("dummy"), tool)
        self.assertIsNone(registry.get_tool("Dummy"))
        self.assertEqual(list(registry), [tool])

    def test_duplicate_name_keeps_first(self):
        first, second = DummyTool(self.config), DummyTool(self.config)
        registry = ToolRegistry(self.config, [first])
        self.assertFalse(registry.register(second))
        self.assertIs(registry.get_tool("dummy"), first)
        self.assertEqual(registry.tools, [first])

    def test_tool_descriptions(self):
        registry = ToolRegistry(self.config)
        registry.discover_tools()
        descriptions = registry.get_tool_descriptions()
        self.assertIn("### shell", descriptions)
        self.assertIn("### file_read", descriptions)
