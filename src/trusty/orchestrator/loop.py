"""Turn orchestrator for the tool-assisted advisor.

Drives one advisor run through at most three model turns:

1. tool selection: the user's prompt with the registered tools offered;
2. tool answer: the full context plus the tool result, tools disabled;
3. summary: a fresh two-message context asking for a one-paragraph
   recommendation, tools disabled.

A reply without tool calls on turn 1 ends the run immediately. Every error
is fatal: the orchestrator moves to FAILED and re-raises.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from trusty.conversation import ConversationState
from trusty.exceptions import BackendError, TrustyError
from trusty.models.messages import AssistantMessage, ToolMessage, UserMessage
from trusty.orchestrator.config import OrchestratorConfig, TurnState
from trusty.orchestrator.models import OrchestratorResult
from trusty.prompts.advisor import build_user_prompt
from trusty.timeouts import guard_turn

if TYPE_CHECKING:
    from trusty.llm.protocols import ChatBackend
    from trusty.toolkit.models import ToolDescriptor
    from trusty.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs the prompt -> tool call -> summary protocol against a backend.

    Only the first tool call of the first reply is acted upon; any others
    are logged and ignored.

    Usage::

        orch = Orchestrator(backend, ToolRegistry([TrustyReportTool(client)]))
        result = orch.run("is left-pad safe")
        print(result.answer)
    """

    def __init__(
        self,
        backend: ChatBackend,
        registry: ToolRegistry,
        config: OrchestratorConfig | None = None,
    ) -> None:
        self._backend = backend
        self._registry = registry
        self._config = config or OrchestratorConfig()
        self._state = TurnState.INIT
        self._transitions: list[TurnState] = [TurnState.INIT]
        self._failed_from: TurnState | None = None
        self._turns = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> TurnState:
        """Return the current state."""
        return self._state

    @property
    def failed_from(self) -> TurnState | None:
        """State the last run was in when it failed, or None."""
        return self._failed_from

    @property
    def transitions(self) -> tuple[TurnState, ...]:
        return tuple(self._transitions)

    def run(self, query: str) -> OrchestratorResult:
        """Answer ``query``, calling the registered tool if the model asks.

        Returns:
            OrchestratorResult in DIRECT_ANSWER or DONE state.

        Raises:
            ArgumentError: The tool call's arguments are invalid.
            ReportLookupError: The tool's lookup failed.
            UnexpectedToolError: The model called an unregistered tool.
            TurnTimeoutError: A model turn exceeded its bound.
            BackendError: A model turn failed for any other reason.
        """
        self._state = TurnState.INIT
        self._transitions = [TurnState.INIT]
        self._failed_from = None
        self._turns = 0

        try:
            return self._run(query)
        except TrustyError:
            self._failed_from = self._state
            self._transition(TurnState.FAILED)
            raise

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _run(self, query: str) -> OrchestratorResult:
        conversation = ConversationState(
            [UserMessage(content=build_user_prompt(query, self._config.prompt_prefix))]
        )

        self._transition(TurnState.AWAITING_FIRST_REPLY)
        reply = self._turn("tool-selection", conversation, self._registry.descriptors())

        if not reply.tool_calls:
            conversation.append(reply)
            logger.info("The model did not use tools; returning its own answer")
            self._transition(TurnState.DIRECT_ANSWER)
            return self._result(reply.content, conversation)

        self._transition(TurnState.TOOL_REQUESTED)
        call, *ignored = reply.tool_calls
        # Every call id sent back must be answered by a tool message.
        conversation.append(reply.model_copy(update={"tool_calls": (call,)}))
        if ignored:
            logger.warning(
                "Model requested %d tool calls; handling only the first (%s)",
                len(reply.tool_calls),
                call.name,
            )
        invoker = self._registry.resolve(call.name)

        logger.info("Handling %s function call", call.name)
        self._transition(TurnState.AWAITING_TOOL_RESULT)
        tool_result = invoker.invoke(call.arguments)
        conversation.append(
            ToolMessage(content=tool_result.content, name=call.name, tool_call_id=call.id)
        )
        tool_reply = self._turn("tool-answer", conversation, None)
        conversation.append(tool_reply)

        logger.info("Handling %s response", call.name)
        self._transition(TurnState.AWAITING_SUMMARY_REPLY)
        summary_conversation = ConversationState(
            [
                UserMessage(content=tool_reply.content),
                UserMessage(content=self._config.summary_instruction),
            ]
        )
        summary = self._turn("summary", summary_conversation, None)
        summary_conversation.append(summary)

        self._transition(TurnState.DONE)
        return self._result(
            summary.content,
            conversation,
            summary_conversation=summary_conversation,
            tool_call=call,
            tool_result=tool_result,
            ignored_tool_calls=tuple(ignored),
        )

    def _turn(
        self,
        name: str,
        conversation: ConversationState,
        tools: list[ToolDescriptor] | None,
    ) -> AssistantMessage:
        """Issue one model turn under its own time bound."""
        seconds = self._config.turn_timeout
        messages = conversation.messages
        self._turns += 1
        logger.debug("Turn %d (%s): %d messages, tools=%s", self._turns, name, len(messages), bool(tools))

        try:
            reply = guard_turn(
                lambda: self._backend.chat(messages, tools or None, timeout=seconds),
                turn=name,
                seconds=seconds,
            )
        except TrustyError:
            raise
        except Exception as exc:
            raise BackendError(f"{name} turn failed: {type(exc).__name__}: {exc}") from exc

        if not isinstance(reply, AssistantMessage):
            raise BackendError(
                f"{name} turn returned {type(reply).__name__}, expected AssistantMessage"
            )
        return reply

    def _transition(self, new_state: TurnState) -> None:
        old_state = self._state
        self._state = new_state
        self._transitions.append(new_state)
        callback = self._config.on_transition
        if callback is not None:
            try:
                callback(old_state, new_state)
            except Exception:
                logger.debug("on_transition callback error", exc_info=True)

    def _result(
        self,
        answer: str,
        conversation: ConversationState,
        **kwargs: object,
    ) -> OrchestratorResult:
        return OrchestratorResult(
            answer=answer,
            state=self._state,
            transitions=tuple(self._transitions),
            conversation=conversation,
            turns=self._turns,
            **kwargs,  # type: ignore[arg-type]
        )
