"""Model providers — the Ollama REST client and the provider interface it implements."""

import asyncio
from abc import ABC, abstractmethod
from typing import Iterable

import aiohttp
from agent.exceptions import OllamaConnectionError, OllamaModelError


class ModelProvider(ABC):
    """A chat model the agent loop can query."""

    @abstractmethod
    async def chat_with_system(
        self,
        system_prompt: str | None,
        message: str,
        model: str,
        temperature: float,
    ) -> str:
        """Send one message and return the full response text.

        Raises a ProviderError subclass when no response can be produced.
        """
        ...


class OllamaClient(ModelProvider):
    """Direct async HTTP client for the Ollama API."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        connect_timeout: float = 5.0,
        read_timeout: float = 120.0,
        options: dict | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.options = options or {}

    async def health_check(self) -> bool:
        """Check if Ollama is running. GET /api/tags"""
        try:
            async with aiohttp.ClientSession(timeout=self._timeout()) as session:
                async with session.get(f"{self.base_url}/api/tags") as resp:
                    return resp.status == 200
        except (aiohttp.ClientError, asyncio.TimeoutError):
            return False

    async def list_models(self) -> list[dict]:
        """List available local models. GET /api/tags"""
        try:
            async with aiohttp.ClientSession(timeout=self._timeout()) as session:
                async with session.get(f"{self.base_url}/api/tags") as resp:
                    if resp.status != 200:
                        body = await resp.text()
                        raise OllamaConnectionError(
                            f"Failed to list models (HTTP {resp.status}): {body}"
                        )
                    data = await resp.json()
                    return data.get("models", [])
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise OllamaConnectionError(self._connection_error_message("list models", e)) from e

    async def get_missing_models(self, required_models: Iterable[str]) -> list[str]:
        """Return a list of required model names that are not available."""
        models = await self.list_models()
        names = [m.get("name", "") for m in models]
        return self.filter_missing_models(required_models, names)

    @staticmethod
    def filter_missing_models(
        required_models: Iterable[str],
        available_models: Iterable[str],
    ) -> list[str]:
        """Filter required models against a list of available model names."""
        available = [m for m in available_models if m]
        missing: list[str] = []
        for required in required_models:
            if not required:
                continue
            if not OllamaClient._model_available(required, available):
                missing.append(required)
        return missing

    @staticmethod
    def _model_available(required: str, available: Iterable[str]) -> bool:
        """Check whether a model name is available, accounting for tags."""
        if required in available:
            return True
        tag_prefix = f"{required}:"
        return any(name.startswith(tag_prefix) for name in available)

    async def chat_with_system(
        self,
        system_prompt: str | None,
        message: str,
        model: str,
        temperature: float,
    ) -> str:
        """
        Send a non-streaming chat request. POST /api/chat
        Returns the assistant message content.
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": message})

        payload = {
            "model": model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": temperature,
                **self.options,
            },
        }

        try:
            async with aiohttp.ClientSession(timeout=self._timeout()) as session:
                async with session.post(f"{self.base_url}/api/chat", json=payload) as resp:
                    if resp.status == 404:
                        raise OllamaModelError(
                            f"Model '{model}' not found. Pull it with: ollama pull {model}"
                        )
                    if resp.status != 200:
                        body = await resp.text()
                        raise OllamaConnectionError(
                            f"Ollama chat failed (HTTP {resp.status}): {body}"
                        )
                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise OllamaConnectionError(self._connection_error_message("chat", e)) from e

        message_data = data.get("message") or {}
        return message_data.get("content", "")

    def _timeout(self) -> aiohttp.ClientTimeout:
        """Build a client timeout configuration from settings."""
        return aiohttp.ClientTimeout(
            total=None,
            connect=self.connect_timeout,
            sock_connect=self.connect_timeout,
            sock_read=self.read_timeout,
        )

    def _connection_error_message(self, operation: str, error: Exception | None) -> str:
        """Create a user-friendly connection error message."""
        details = f"{error}" if error else "unknown error"
        return f"Cannot connect to Ollama at {self.base_url} during {operation}: {details}"
