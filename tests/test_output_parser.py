import tempfile
import time
import unittest
from pathlib import Path

from agent.output_parser import (
    OutputParser,
    extract_calls_from_value,
    extract_from_json_fence,
    extract_from_tool_calls_fence,
    extract_from_whole_response,
    extract_inline_calls,
    parse_tool_calls,
)
from agent.response import ToolCall


class TestOutputParser(unittest.TestCase):
    def setUp(self):
        self.parser = OutputParser()

    def test_tool_calls_fence_function_format(self):
        raw = (
            "```tool_calls\n"
            "[\n"
            "  {\n"
            "    \"function\": {\n"
            "      \"name\": \"shell\",\n"
            "      \"arguments\": {\"command\": \"ls\"}\n"
            "    }\n"
            "  }\n"
            "]\n"
            "```"
        )
        calls = self.parser.parse(raw)
        self.assertEqual(calls, [ToolCall(name="shell", arguments={"command": "ls"})])

    def test_json_fence_tool_use_format(self):
        raw = (
            "Reading the file now.\n"
            "```json\n"
            "[{\"type\": \"tool_use\", \"name\": \"file_read\", \"input\": {\"path\": \"/tmp/file.txt\"}}]\n"
            "```"
        )
        calls = self.parser.parse(raw)
        self.assertEqual(len(calls), 1)
        self.assertEqual(calls[0].name, "file_read")
        self.assertEqual(calls[0].arguments, {"path": "/tmp/file.txt"})

    def test_whole_response_simple_format(self):
        raw = '{"name": "shell", "arguments": {"command": "echo hi"}}'
        calls = self.parser.parse(raw)
        self.assertEqual(calls, [ToolCall(name="shell", arguments={"command": "echo hi"})])

    def test_whole_response_is_trimmed(self):
        raw = '\n  {"name": "shell", "arguments": {"command": "pwd"}}  \n'
        calls = self.parser.parse(raw)
        self.assertEqual([c.name for c in calls], ["shell"])

    def test_plain_text_yields_no_calls(self):
        raw = "This is just regular text without any tool calls."
        self.assertEqual(self.parser.parse(raw), [])

    def test_prose_with_parentheses_yields_no_calls(self):
        raw = "I think (maybe) the answer is 42, see the notes (above)."
        self.assertEqual(self.parser.parse(raw), [])

    def test_empty_response_yields_no_calls(self):
        self.assertEqual(self.parser.parse(""), [])

    def test_fenced_block_wins_over_inline_call(self):
        raw = (
            "First I considered shell({\"command\": \"pwd\"}) but instead:\n"
            "```tool_calls\n"
            "[{\"name\": \"file_read\", \"arguments\": {\"path\": \"a.txt\"}}]\n"
            "```"
        )
        calls = self.parser.parse(raw)
        self.assertEqual(calls, [ToolCall(name="file_read", arguments={"path": "a.txt"})])

    def test_tool_calls_fence_wins_over_json_fence(self):
        raw = (
            "```json\n{\"name\": \"file_read\", \"arguments\": {\"path\": \"b\"}}\n```\n"
            "```tool_calls\n{\"name\": \"shell\", \"arguments\": {\"command\": \"ls\"}}\n```"
        )
        calls = self.parser.parse(raw)
        self.assertEqual([c.name for c in calls], ["shell"])

    def test_malformed_tool_calls_fence_falls_through_to_json_fence(self):
        raw = (
            "```tool_calls\nnot json at all\n```\n"
            "```json\n{\"name\": \"shell\", \"arguments\": {\"command\": \"ls\"}}\n```"
        )
        calls = self.parser.parse(raw)
        self.assertEqual(calls, [ToolCall(name="shell", arguments={"command": "ls"})])

    def test_unclosed_fence_is_a_miss(self):
        raw = "```tool_calls\n[{\"name\": \"shell\"}]\n"
        self.assertEqual(extract_from_tool_calls_fence(raw), [])

    def test_three_shapes_are_equivalent(self):
        shapes = [
            '{"function": {"name": "shell", "arguments": {"command": "ls"}}}',
            '{"type": "tool_use", "name": "shell", "input": {"command": "ls"}}',
            '{"name": "shell", "arguments": {"command": "ls"}}',
        ]
        expected = [ToolCall(name="shell", arguments={"command": "ls"})]
        for raw in shapes:
            with self.subTest(raw=raw):
                self.assertEqual(self.parser.parse(raw), expected)

    def test_inline_calls(self):
        raw = 'I will run shell({"command": "ls"}) and then file_read({"path": "x"}).'
        calls = self.parser.parse(raw)
        self.assertEqual(
            calls,
            [
                ToolCall(name="shell", arguments={"command": "ls"}),
                ToolCall(name="file_read", arguments={"path": "x"}),
            ],
        )

    def test_inline_array_argument(self):
        calls = extract_inline_calls("batch([1, 2, 3])")
        self.assertEqual(calls, [ToolCall(name="batch", arguments=[1, 2, 3])])

    def test_inline_call_with_unparseable_arguments_is_skipped(self):
        raw = 'See note(above), then shell({"command": "ls"})'
        calls = self.parser.parse(raw)
        self.assertEqual(calls, [ToolCall(name="shell", arguments={"command": "ls"})])

    def test_parse_tool_calls_helper(self):
        calls = parse_tool_calls('{"tool": "shell", "args": {"command": "ls"}}')
        self.assertEqual(calls, [ToolCall(name="shell", arguments={"command": "ls"})])

    def test_logs_when_no_calls_found(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir)
            parser = OutputParser(str(log_dir))
            raw = "no tools here"
            self.assertEqual(parser.parse(raw), [])
            log_path = log_dir / "output_parser.log"
            self.assertTrue(log_path.exists())
            content = log_path.read_text(encoding="utf-8")
            self.assertIn("RAW_OUTPUT", content)
            self.assertIn(raw, content)


class TestStrategies(unittest.TestCase):
    def test_each_strategy_misses_on_prose(self):
        text = "Nothing to see here."
        for strategy in (
            extract_from_tool_calls_fence,
            extract_from_json_fence,
            extract_from_whole_response,
            extract_inline_calls,
        ):
            with self.subTest(strategy=strategy.__name__):
                self.assertEqual(strategy(text), [])

    def test_json_fence_ignores_tool_calls_fence(self):
        raw = "```tool_calls\n{\"name\": \"shell\"}\n```"
        self.assertEqual(extract_from_json_fence(raw), [])

    def test_fence_without_newline_after_marker(self):
        raw = '```tool_calls{"name": "shell"}```'
        self.assertEqual(extract_from_tool_calls_fence(raw), [ToolCall(name="shell", arguments={})])

    def test_long_word_scans_in_linear_time(self):
        text = "Here is the encoded value: " + "A" * 100_000 + " done."
        start = time.monotonic()
        self.assertEqual(extract_inline_calls(text), [])
        self.assertLess(time.monotonic() - start, 2.0)

    def test_inline_call_after_long_word(self):
        text = "A" * 50_000 + ' then shell({"command": "ls"})'
        self.assertEqual(extract_inline_calls(text), [ToolCall(name="shell", arguments={"command": "ls"})])


class TestCallShapeExtraction(unittest.TestCase):
    def test_array_keeps_only_recognized_items(self):
        value = [{"foo": 1}, {"name": "shell"}, "text", {"tool": "file_read", "params": {"path": "p"}}]
        calls = extract_calls_from_value(value)
        self.assertEqual(
            calls,
            [
                ToolCall(name="shell", arguments={}),
                ToolCall(name="file_read", arguments={"path": "p"}),
            ],
        )

    def test_missing_arguments_default_to_empty_object(self):
        self.assertEqual(
            extract_calls_from_value({"function": {"name": "shell"}}),
            [ToolCall(name="shell", arguments={})],
        )
        self.assertEqual(
            extract_calls_from_value({"type": "tool_use", "name": "shell"}),
            [ToolCall(name="shell", arguments={})],
        )

    def test_generic_argument_key_priority(self):
        value = {"name": "shell", "args": {"a": 1}, "arguments": {"b": 2}, "params": {"c": 3}}
        self.assertEqual(extract_calls_from_value(value)[0].arguments, {"b": 2})

        value = {"name": "shell", "params": {"c": 3}, "input": {"d": 4}}
        self.assertEqual(extract_calls_from_value(value)[0].arguments, {"d": 4})

    def test_name_takes_priority_over_tool(self):
        calls = extract_calls_from_value({"name": "shell", "tool": "file_read"})
        self.assertEqual(calls[0].name, "shell")

    def test_malformed_function_field_is_skipped(self):
        self.assertEqual(extract_calls_from_value({"function": "shell", "name": "shell"}), [])
        self.assertEqual(extract_calls_from_value({"function": {"arguments": {}}}), [])

    def test_non_string_or_empty_name_is_skipped(self):
        self.assertEqual(extract_calls_from_value({"name": 5, "arguments": {}}), [])
        self.assertEqual(extract_calls_from_value({"name": "", "arguments": {}}), [])

    def test_scalars_are_skipped(self):
        self.assertEqual(extract_calls_from_value(None), [])
        self.assertEqual(extract_calls_from_value(42), [])
        self.assertEqual(extract_calls_from_value("shell"), [])
