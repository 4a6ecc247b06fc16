"""One-shot CLI for the Ollama tool loop."""

import uuid

from agent.agent import Agent
from agent.config import AgentConfig
from agent.models import OllamaClient
from agent.telemetry import Telemetry
from tools.tool_registry import ToolRegistry


# ANSI color codes
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"


class CLIApp:
    """Runs a single message through the tool loop and prints the answer."""

    def __init__(self, config: AgentConfig):
        self.config = config
        self.client = OllamaClient(
            base_url=config.chat_model.base_url,
            connect_timeout=config.ollama.connect_timeout,
            read_timeout=config.ollama.read_timeout,
            options=config.chat_model.options,
        )
        self.registry = ToolRegistry(config)
        self.registry.discover_tools()

    def build_agent(self, session_id: str) -> Agent:
        """Wire the provider, tools and telemetry into an Agent."""
        return Agent(
            provider=self.client,
            tools=self.registry,
            max_tool_iterations=self.config.max_tool_iterations,
            telemetry=Telemetry(self.config.telemetry, session_id),
            log_dir=self.config.log_dir,
        )

    def build_system_prompt(self) -> str:
        """Configured prompt followed by the tool listing."""
        return (
            self.config.system_prompt
            + "\n\n## Available Tools\n\n"
            + self.registry.get_tool_descriptions()
        )

    async def run(self, message: str) -> int:
        """Answer one message. Returns a process exit code."""
        if self.config.ollama.health_check_on_start and not await self._preflight_ollama():
            return 1

        agent = self.build_agent(uuid.uuid4().hex[:12])
        try:
            result = await agent.handle_message(
                message,
                self.build_system_prompt(),
                self.config.chat_model.model_name,
                self.config.chat_model.temperature,
            )
        except Exception as e:
            print(f"{RED}[Error: {e}]{RESET}")
            return 1

        if not result:
            print(
                f"{YELLOW}[No final answer after {self.config.max_tool_iterations} "
                f"tool iteration(s)]{RESET}"
            )
            return 0

        print(f"{BOLD}{GREEN}Agent:{RESET} {result}")
        return 0

    async def _preflight_ollama(self) -> bool:
        """Check Ollama connectivity and model availability before starting."""
        base_url = self.config.chat_model.base_url
        if not await self.client.health_check():
            print(f"{RED}[Error] Cannot connect to Ollama at {base_url}{RESET}")
            print(f"{DIM}Make sure Ollama is running: ollama serve{RESET}")
            return False

        try:
            missing = await self.client.get_missing_models([self.config.chat_model.model_name])
        except Exception as e:
            print(f"{RED}[Error] {e}{RESET}")
            return False

        if missing:
            print(f"{RED}[Error] Missing models at {base_url}: {', '.join(missing)}{RESET}")
            print(f"{DIM}Pull with: ollama pull <model>{RESET}")
            return False
        return True
