"""Shell tool — runs a command in the workspace directory."""

import asyncio

from tools.base_tool import Tool
from agent.response import ToolResult


class ShellTool(Tool):
    name = "shell"
    description = (
        "Execute terminal commands. Use when: running local checks, build/test commands, "
        "diagnostics. Arguments: {\"command\": \"<shell command>\"}"
    )

    async def execute(self, arguments) -> ToolResult:
        command = self.require_str(arguments, "command")
        timeout = self.config.shell.timeout

        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=self.config.workspace_dir,
        )
        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return ToolResult.failed(f"Command timed out after {timeout}s")

        output = self._truncate(stdout.decode("utf-8", errors="replace").strip())
        if process.returncode != 0:
            return ToolResult.failed(f"Command exited with status {process.returncode}: {output}")
        return ToolResult.ok(output)

    def _truncate(self, output: str) -> str:
        max_len = self.config.shell.max_output_chars
        if len(output) > max_len:
            return output[:max_len] + f"\n\n[Output truncated at {max_len} characters]"
        return output
