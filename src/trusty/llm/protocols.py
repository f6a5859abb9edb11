"""Chat backend protocol.

Any object with chat() and close() methods matching this signature can
drive the orchestrator. The built-in OllamaClient and OpenAIClient
implement it; tests use scripted fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from trusty.conversation import AnyMessage
    from trusty.models.messages import AssistantMessage
    from trusty.toolkit.models import ToolDescriptor


@runtime_checkable
class ChatBackend(Protocol):
    """Protocol for pluggable chat backends."""

    def chat(
        self,
        messages: Sequence[AnyMessage],
        tools: Sequence[ToolDescriptor] | None = None,
        *,
        timeout: float | None = None,
    ) -> AssistantMessage:
        """Send the messages, offering ``tools`` when given; return the reply.

        ``tools=None`` means tool use must not be offered on this turn.
        """
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
