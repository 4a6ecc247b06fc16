"""Configuration loading and validation."""

import json
import os
from dataclasses import dataclass, field
from agent.exceptions import ConfigError

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant with access to tools. To use a tool, reply with a "
    "fenced block:\n"
    "```tool_calls\n"
    '[{"name": "<tool name>", "arguments": {...}}]\n'
    "```\n"
    "You will receive the tool results in the next message. When you have the "
    "answer, reply in plain text without any tool calls."
)


@dataclass
class ModelConfig:
    """Configuration for the chat model."""
    model_name: str = "llama3.2"
    base_url: str = "http://localhost:11434"
    temperature: float = 0.7
    options: dict = field(default_factory=dict)


@dataclass
class OllamaSettings:
    """Configuration for Ollama connectivity."""
    connect_timeout: float = 5.0
    read_timeout: float = 120.0
    health_check_on_start: bool = True


@dataclass
class ShellConfig:
    """Configuration for the shell tool."""
    timeout: float = 60.0
    max_output_chars: int = 50000


@dataclass
class TelemetryConfig:
    """Configuration for telemetry and metrics logging."""
    enabled: bool = False
    log_dir: str = "./data/metrics"
    otel_enabled: bool = False
    otel_endpoint: str | None = None
    otel_service_name: str = "ollama-tool-loop"


@dataclass
class AgentConfig:
    """Complete agent configuration."""
    chat_model: ModelConfig = field(default_factory=ModelConfig)
    ollama: OllamaSettings = field(default_factory=OllamaSettings)
    shell: ShellConfig = field(default_factory=ShellConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    max_tool_iterations: int = 10
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    workspace_dir: str = "."
    data_dir: str = "data"
    log_dir: str = "data/logs"


def load_config(config_path: str = "config.json") -> AgentConfig:
    """Load configuration from JSON file with defaults."""
    if not os.path.exists(config_path):
        return AgentConfig()

    try:
        with open(config_path, "r") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}")

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain a JSON object")

    data_dir = raw.get("data_dir", "data")

    chat_model = _load_model_settings(raw.get("chat_model", {}))
    env_base_url = os.getenv("OLLAMA_BASE_URL")
    if env_base_url:
        chat_model.base_url = env_base_url

    ollama = _load_ollama_settings(raw.get("ollama", {}))
    shell = _load_shell_settings(raw.get("shell", {}))
    telemetry = _load_telemetry_settings(raw.get("telemetry", {}), data_dir)

    max_tool_iterations = _coerce_int(
        raw.get("max_tool_iterations", 10), "max_tool_iterations", 1
    )

    system_prompt = raw.get("system_prompt", DEFAULT_SYSTEM_PROMPT)
    if not isinstance(system_prompt, str):
        raise ConfigError("system_prompt must be a string")

    workspace_dir = raw.get("workspace_dir", ".")
    if not isinstance(workspace_dir, str) or not workspace_dir.strip():
        raise ConfigError("workspace_dir must be a non-empty string")

    # Ensure data directories exist
    log_dir = raw.get("log_dir", os.path.join(data_dir, "logs"))
    for d in [data_dir, log_dir, telemetry.log_dir]:
        os.makedirs(d, exist_ok=True)

    return AgentConfig(
        chat_model=chat_model,
        ollama=ollama,
        shell=shell,
        telemetry=telemetry,
        max_tool_iterations=max_tool_iterations,
        system_prompt=system_prompt,
        workspace_dir=workspace_dir,
        data_dir=data_dir,
        log_dir=log_dir,
    )


def _load_model_settings(raw: dict) -> ModelConfig:
    """Parse and validate chat model settings."""
    if not isinstance(raw, dict):
        raise ConfigError("chat_model must be an object")

    model_name = raw.get("model_name", "llama3.2")
    if not isinstance(model_name, str) or not model_name.strip():
        raise ConfigError("chat_model.model_name must be a non-empty string")

    base_url = raw.get("base_url", "http://localhost:11434")
    if not isinstance(base_url, str) or not base_url.strip():
        raise ConfigError("chat_model.base_url must be a non-empty string")

    temperature = _coerce_float(raw.get("temperature", 0.7), "chat_model.temperature", 0.0)

    options = raw.get("options", {})
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ConfigError("chat_model.options must be an object")

    return ModelConfig(
        model_name=model_name.strip(),
        base_url=base_url.strip(),
        temperature=temperature,
        options=options,
    )


def _load_ollama_settings(raw: dict) -> OllamaSettings:
    """Parse and validate Ollama settings from config."""
    if not isinstance(raw, dict):
        raise ConfigError("ollama must be an object")

    connect_timeout = _coerce_float(raw.get("connect_timeout", 5.0), "ollama.connect_timeout", 0.1)
    read_timeout = _coerce_float(raw.get("read_timeout", 120.0), "ollama.read_timeout", 0.1)

    health_check_on_start = raw.get("health_check_on_start", True)
    if not isinstance(health_check_on_start, bool):
        raise ConfigError("ollama.health_check_on_start must be a boolean")

    return OllamaSettings(
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        health_check_on_start=health_check_on_start,
    )


def _load_shell_settings(raw: dict) -> ShellConfig:
    """Parse and validate shell tool settings."""
    if not isinstance(raw, dict):
        raise ConfigError("shell must be an object")

    timeout = _coerce_float(raw.get("timeout", 60.0), "shell.timeout", 0.1)
    max_output_chars = _coerce_int(
        raw.get("max_output_chars", 50000), "shell.max_output_chars", 1
    )
    return ShellConfig(timeout=timeout, max_output_chars=max_output_chars)


def _load_telemetry_settings(raw: dict, data_dir: str) -> TelemetryConfig:
    """Parse and validate telemetry settings."""
    if not isinstance(raw, dict):
        raise ConfigError("telemetry must be an object")

    enabled = raw.get("enabled", False)
    if not isinstance(enabled, bool):
        raise ConfigError("telemetry.enabled must be a boolean")

    log_dir = raw.get("log_dir", os.path.join(data_dir, "metrics"))
    if not isinstance(log_dir, str) or not log_dir.strip():
        raise ConfigError("telemetry.log_dir must be a non-empty string")

    otel_enabled = raw.get("otel_enabled", False)
    if not isinstance(otel_enabled, bool):
        raise ConfigError("telemetry.otel_enabled must be a boolean")

    otel_endpoint = raw.get("otel_endpoint")
    if otel_endpoint is not None and (not isinstance(otel_endpoint, str) or not otel_endpoint.strip()):
        raise ConfigError("telemetry.otel_endpoint must be a non-empty string if provided")

    otel_service_name = raw.get("otel_service_name", "ollama-tool-loop")
    if not isinstance(otel_service_name, str) or not otel_service_name.strip():
        raise ConfigError("telemetry.otel_service_name must be a non-empty string")

    return TelemetryConfig(
        enabled=enabled,
        log_dir=log_dir,
        otel_enabled=otel_enabled,
        otel_endpoint=otel_endpoint.strip() if isinstance(otel_endpoint, str) else None,
        otel_service_name=otel_service_name.strip(),
    )


def _coerce_float(value: object, name: str, min_value: float) -> float:
    """Coerce config value to float with basic validation."""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number")

    if value < min_value:
        raise ConfigError(f"{name} must be >= {min_value}")
    return value


def _coerce_int(value: object, name: str, min_value: int) -> int:
    """Coerce config value to int with basic validation."""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer")
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer")

    if value < min_value:
        raise ConfigError(f"{name} must be >= {min_value}")
    return value
