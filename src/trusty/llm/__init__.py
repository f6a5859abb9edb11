"""Chat backend infrastructure for Trusty.

Provides Ollama and OpenAI-compatible HTTP clients, the pluggable
ChatBackend protocol, and a factory that builds a backend from config.
"""

from __future__ import annotations

from trusty.llm.client import OllamaClient, OpenAIClient
from trusty.llm.errors import (
    BackendAuthError,
    BackendConfigError,
    BackendRateLimitError,
    BackendResponseError,
    BackendTimeoutError,
)
from trusty.llm.protocols import ChatBackend
from trusty.models.config import BackendConfig


def create_backend(config: BackendConfig) -> ChatBackend:
    """Build the chat backend named by ``config.provider``.

    Raises:
        BackendConfigError: If the provider needs settings that are missing.
    """
    if config.provider == "ollama":
        return OllamaClient(
            config.host or "http://localhost:11434",
            config.model,
            max_retries=config.max_retries,
        )
    if config.provider == "openai":
        return OpenAIClient(
            config.model,
            api_key=config.api_key,
            base_url=config.host,
            max_retries=config.max_retries,
        )
    raise BackendConfigError(f"Unknown backend provider: {config.provider}")


__all__ = [
    "BackendAuthError",
    "BackendConfigError",
    "BackendRateLimitError",
    "BackendResponseError",
    "BackendTimeoutError",
    "ChatBackend",
    "OllamaClient",
    "OpenAIClient",
    "create_backend",
]
