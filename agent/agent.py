"""Agent class — the bounded tool-calling loop."""

from __future__ import annotations

import json
import time
from typing import Iterable

from agent.log import build_file_logger
from agent.models import ModelProvider
from agent.output_parser import OutputParser
from agent.response import ToolCall
from agent.telemetry import Telemetry
from agent.tool_executor import execute_tool_call, format_tool_result
from tools.base_tool import Tool

DEFAULT_MAX_TOOL_ITERATIONS = 10


def build_follow_up_prompt(original_message: str, tool_results: list[str]) -> str:
    """Build the next prompt from the first message and the latest tool results only."""
    joined = "\n\n".join(tool_results)
    return (
        f"Previous message: {original_message}\n\n"
        f"Tool execution results:\n{joined}\n\n"
        "Please continue based on these tool results."
    )


class Agent:
    """
    Drives the tool loop for a single user message:
    model call → parse tool calls → execute → feed results back → repeat.
    """

    def __init__(
        self,
        provider: ModelProvider,
        tools: Iterable[Tool],
        max_tool_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS,
        parser: OutputParser | None = None,
        telemetry: Telemetry | None = None,
        log_dir: str | None = None,
    ):
        self.provider = provider
        self.tools: list[Tool] = list(tools)
        self.max_tool_iterations = max_tool_iterations
        self.parser = parser or OutputParser(log_dir)
        self.telemetry = telemetry
        self._logger = build_file_logger(__name__, log_dir, "agent.log")

    # ── Tool loop ────────────────────────────────────────────────────

    async def handle_message(
        self,
        message: str,
        system_prompt: str | None,
        model: str,
        temperature: float,
    ) -> str:
        """
        Run the tool loop until the model answers without tool calls.

        Returns the final answer. If the iteration cap is reached while the
        model is still calling tools, no final answer was captured and the
        result is an empty string. Provider errors propagate to the caller.
        """
        current_message = message
        iteration = 0
        full_response = ""

        while True:
            if iteration >= self.max_tool_iterations:
                self._logger.warning(
                    "Tool calling exceeded maximum iterations (%d)", self.max_tool_iterations
                )
                break

            started = time.monotonic()
            response = await self._call_model(system_prompt, current_message, model, temperature)

            tool_calls = self.parser.parse(response)
            if not tool_calls:
                full_response = response
                self._record_iteration(iteration, "final", started)
                break

            self._logger.info(
                "Iteration %d: executing %d tool call(s)", iteration, len(tool_calls)
            )
            tool_results = []
            for tool_call in tool_calls:
                tool_results.append(await self._run_tool(tool_call))

            current_message = build_follow_up_prompt(message, tool_results)
            self._record_iteration(
                iteration, "tools:" + ",".join(tc.name for tc in tool_calls), started
            )
            iteration += 1

        if self.telemetry:
            self.telemetry.finalize(full_response)
        return full_response

    # ── Model call ───────────────────────────────────────────────────

    async def _call_model(
        self,
        system_prompt: str | None,
        message: str,
        model: str,
        temperature: float,
    ) -> str:
        started = time.monotonic()
        try:
            response = await self.provider.chat_with_system(
                system_prompt, message, model, temperature
            )
        except Exception as e:
            if self.telemetry:
                self.telemetry.record_llm_call(
                    model=model,
                    prompt_chars=len(message),
                    response_chars=0,
                    latency_ms=_elapsed_ms(started),
                    error=str(e),
                )
            raise

        if self.telemetry:
            self.telemetry.record_llm_call(
                model=model,
                prompt_chars=len(message),
                response_chars=len(response),
                latency_ms=_elapsed_ms(started),
            )
        return response

    # ── Tool execution ───────────────────────────────────────────────

    async def _run_tool(self, tool_call: ToolCall) -> str:
        """Execute one tool call and return its formatted feedback."""
        self._logger.info(
            "→ %s with args: %s", tool_call.name, json.dumps(tool_call.arguments, default=str)
        )
        started = time.monotonic()
        result = await execute_tool_call(tool_call, self.tools)
        formatted = format_tool_result(tool_call, result)
        self._logger.info("← %s", formatted)

        if self.telemetry:
            self.telemetry.record_tool_call(
                tool_name=tool_call.name,
                arguments=tool_call.arguments,
                duration_ms=_elapsed_ms(started),
                success=result.success,
                result_summary=(result.output if result.success else result.error or "")[:200],
                error=result.error,
            )
        return formatted

    def _record_iteration(self, iteration: int, decision: str, started: float) -> None:
        if self.telemetry:
            self.telemetry.record_iteration(iteration, decision, _elapsed_ms(started))


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000
