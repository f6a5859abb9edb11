"""Orchestrator result model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trusty.conversation import ConversationState
    from trusty.models.messages import ToolCall
    from trusty.orchestrator.config import TurnState
    from trusty.toolkit.models import ToolResult


@dataclass(frozen=True)
class OrchestratorResult:
    """Final result of a successful run.

    Frozen: the result is immutable once the run completes.

    Attributes:
        answer: Text to show the user.
        state: Terminal state reached (DIRECT_ANSWER or DONE).
        transitions: Every state entered, in order, starting with INIT.
        conversation: Tool-selection context (prompt, replies, tool result).
        summary_conversation: The fresh summarization context, or None for
            a direct answer.
        tool_call: The tool call acted upon, if any.
        tool_result: The tool's output, if a tool ran.
        turns: Number of model turns issued.
        ignored_tool_calls: Extra tool calls from the first reply that were
            not acted upon. They are dropped from ``conversation``.
    """

    answer: str
    state: TurnState
    transitions: tuple[TurnState, ...]
    conversation: ConversationState
    summary_conversation: ConversationState | None = None
    tool_call: ToolCall | None = None
    tool_result: ToolResult | None = None
    turns: int = 0
    ignored_tool_calls: tuple[ToolCall, ...] = ()

    @property
    def used_tool(self) -> bool:
        return self.tool_call is not None
