"""Append-only conversation state.

A ConversationState is the ordered message history a model turn sees.
Insertion order is the context order; messages are never edited or
removed once appended.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Union

from trusty.models.messages import (
    AssistantMessage,
    ToolMessage,
    UserMessage,
    to_ollama,
    to_openai,
)

AnyMessage = Union[UserMessage, AssistantMessage, ToolMessage]


class ConversationState:
    """Ordered, append-only sequence of role-tagged messages.

    Usage::

        conversation = ConversationState([UserMessage(content="Hi")])
        conversation.append(reply)
        backend.chat(conversation.messages)
    """

    def __init__(self, messages: Iterable[AnyMessage] = ()) -> None:
        self._messages: list[AnyMessage] = []
        for message in messages:
            self.append(message)

    def append(self, message: AnyMessage) -> None:
        """Append one message to the end of the history."""
        if not isinstance(message, (UserMessage, AssistantMessage, ToolMessage)):
            raise TypeError(
                f"Expected a message model, got {type(message).__name__}"
            )
        self._messages.append(message)

    @property
    def messages(self) -> tuple[AnyMessage, ...]:
        """Snapshot of the history; later appends do not affect it."""
        return tuple(self._messages)

    @property
    def last(self) -> AnyMessage | None:
        return self._messages[-1] if self._messages else None

    def to_ollama(self) -> list[dict]:
        return [to_ollama(m) for m in self._messages]

    def to_openai(self) -> list[dict]:
        return [to_openai(m) for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[AnyMessage]:
        return iter(tuple(self._messages))

    def __repr__(self) -> str:
        roles = ", ".join(m.role for m in self._messages)
        return f"ConversationState([{roles}])"
