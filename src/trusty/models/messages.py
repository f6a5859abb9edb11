"""Message type system for Trusty.

Messages are frozen Pydantic models tagged by ``role`` and combined into a
discriminated union (Message). Tool calls carry parsed argument dicts;
wire-format parsing for Ollama and OpenAI happens at ingestion time.
"""

from __future__ import annotations

import json
import uuid
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from trusty.exceptions import MessageValidationError

# Closed set of scalar values a declared tool argument may take.
ArgumentValue = Union[str, int, float, bool]


def _new_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:8]}"


class ToolCall(BaseModel):
    """A tool/function invocation requested by the model.

    Provider-agnostic canonical representation. Arguments are always a
    parsed dict.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_call_id)
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_ollama(cls, tc: dict) -> ToolCall:
        """Parse from Ollama format.

        Ollama sends arguments as a dict and usually omits the call id,
        so a local id is generated.
        """
        return cls._from_function(tc)

    @classmethod
    def from_openai(cls, tc: dict) -> ToolCall:
        """Parse from OpenAI/compatible format.

        OpenAI sends arguments as a JSON string; this parses it to a dict.
        Unparseable arguments are kept under ``_raw`` so that argument
        validation reports them instead of losing them.
        """
        return cls._from_function(tc)

    @classmethod
    def _from_function(cls, tc: dict) -> ToolCall:
        func = tc.get("function") or {}
        return cls(
            id=tc.get("id") or _new_call_id(),
            name=func.get("name", ""),
            arguments=_parse_arguments(func.get("arguments")),
        )

    def to_ollama(self) -> dict:
        return {"function": {"name": self.name, "arguments": dict(self.arguments)}}

    def to_openai(self) -> dict:
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.name,
                "arguments": json.dumps(self.arguments),
            },
        }


def _parse_arguments(raw: object) -> dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw or "{}")
        except json.JSONDecodeError:
            return {"_raw": raw}
        return parsed if isinstance(parsed, dict) else {"_raw": raw}
    return {"_raw": raw}


# ---------------------------------------------------------------------------
# Message variants
# ---------------------------------------------------------------------------


class UserMessage(BaseModel):
    """A message written by (or on behalf of) the user."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user"] = "user"
    content: str


class AssistantMessage(BaseModel):
    """A model reply, optionally requesting tool calls."""

    model_config = ConfigDict(frozen=True)

    role: Literal["assistant"] = "assistant"
    content: str = ""
    tool_calls: tuple[ToolCall, ...] = ()


class ToolMessage(BaseModel):
    """The result of a tool invocation, fed back as model context."""

    model_config = ConfigDict(frozen=True)

    role: Literal["tool"] = "tool"
    content: str
    name: str | None = None
    tool_call_id: str | None = None


Message = Annotated[
    Union[UserMessage, AssistantMessage, ToolMessage],
    Field(discriminator="role"),
]

_message_adapter = TypeAdapter(Message)


def validate_message(data: dict) -> UserMessage | AssistantMessage | ToolMessage:
    """Validate a message dict against the role-tagged union.

    Raises:
        MessageValidationError: If the dict matches no variant.
    """
    try:
        return _message_adapter.validate_python(data)
    except ValidationError as e:
        raise MessageValidationError(f"Message validation failed: {e}") from e


# ---------------------------------------------------------------------------
# Wire formats
# ---------------------------------------------------------------------------


def to_ollama(message: UserMessage | AssistantMessage | ToolMessage) -> dict:
    """Convert a message to the Ollama ``/api/chat`` message format."""
    d: dict = {"role": message.role, "content": message.content}
    if isinstance(message, AssistantMessage) and message.tool_calls:
        d["tool_calls"] = [tc.to_ollama() for tc in message.tool_calls]
    return d


def to_openai(message: UserMessage | AssistantMessage | ToolMessage) -> dict:
    """Convert a message to the OpenAI chat completion message format."""
    d: dict = {"role": message.role, "content": message.content}
    if isinstance(message, AssistantMessage) and message.tool_calls:
        d["tool_calls"] = [tc.to_openai() for tc in message.tool_calls]
    if isinstance(message, ToolMessage):
        if message.tool_call_id is not None:
            d["tool_call_id"] = message.tool_call_id
        if message.name is not None:
            d["name"] = message.name
    return d
