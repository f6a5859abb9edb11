"""Toolkit data models.

Frozen dataclasses for tool descriptors and results, plus the ToolInvoker
protocol every registered tool implements.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class ToolDescriptor:
    """A single tool declaration for LLM consumption.

    Attributes:
        name: Tool name the model must use to call it.
        description: Human-readable description of when/why to use this tool.
        parameters: JSON Schema ``properties`` mapping, one entry per argument.
        required: Names of arguments that must be present.
    """

    name: str
    description: str
    parameters: Mapping[str, Mapping[str, Any]]
    required: tuple[str, ...] = ()

    def schema(self) -> dict:
        """Return the full JSON Schema object for the arguments."""
        return {
            "type": "object",
            "properties": {k: dict(v) for k, v in self.parameters.items()},
            "required": list(self.required),
        }

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format.

        Returns:
            Dict with "type": "function" and nested "function" object.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.schema(),
            },
        }

    def to_ollama(self) -> dict:
        """Convert to Ollama tool format (same shape as OpenAI's)."""
        return self.to_openai()


@dataclass(frozen=True)
class ToolResult:
    """Structured result from executing a tool.

    Attributes:
        tool_name: Name of the tool that was executed.
        content: Text inserted into the conversation as the tool message.
    """

    tool_name: str
    content: str


@runtime_checkable
class ToolInvoker(Protocol):
    """Anything that executes one tool call and returns its result."""

    descriptor: ToolDescriptor

    def invoke(self, arguments: Mapping[str, Any]) -> ToolResult:
        ...
