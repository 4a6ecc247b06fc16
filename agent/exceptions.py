"""Custom exceptions for the Ollama tool loop."""


class ProviderError(Exception):
    """Raised when the model provider fails to produce a response."""
    pass


class OllamaConnectionError(ProviderError):
    """Raised when unable to connect to the Ollama server."""
    pass


class OllamaModelError(ProviderError):
    """Raised when the requested model is not available."""
    pass


class ToolExecutionError(Exception):
    """Raised when a tool fails during execution."""
    pass


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""
    pass
