"""Orchestrator configuration types.

Provides TurnState, the states of one advisor run, and OrchestratorConfig.

State flow::

    INIT -> AWAITING_FIRST_REPLY -> DIRECT_ANSWER
                                 -> TOOL_REQUESTED -> AWAITING_TOOL_RESULT
                                    -> AWAITING_SUMMARY_REPLY -> DONE

FAILED is reachable from every non-terminal state.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable

from trusty.prompts.advisor import ADVISOR_PROMPT, SUMMARY_INSTRUCTION


class TurnState(str, enum.Enum):
    """States an orchestrator run moves through."""

    INIT = "init"
    AWAITING_FIRST_REPLY = "awaiting_first_reply"
    DIRECT_ANSWER = "direct_answer"
    TOOL_REQUESTED = "tool_requested"
    AWAITING_TOOL_RESULT = "awaiting_tool_result"
    AWAITING_SUMMARY_REPLY = "awaiting_summary_reply"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (TurnState.DIRECT_ANSWER, TurnState.DONE, TurnState.FAILED)


@dataclass
class OrchestratorConfig:
    """Configuration for the advisor orchestrator.

    Attributes:
        turn_timeout: Time bound in seconds applied to each model turn
            separately.
        prompt_prefix: Instructional prefix joined to the user's query.
        summary_instruction: Instruction sent with the tool-turn answer on
            the final summarization turn.
        on_transition: Observer called with (old_state, new_state) on every
            transition. Exceptions it raises are logged and ignored.
    """

    turn_timeout: float = 30.0
    prompt_prefix: str = ADVISOR_PROMPT
    summary_instruction: str = SUMMARY_INSTRUCTION
    on_transition: Callable[[TurnState, TurnState], None] | None = None
