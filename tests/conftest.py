"""Shared test fixtures for Trusty.

Provides a scripted chat backend, a fake report lookup and helpers for
building assistant replies.
"""

from __future__ import annotations

import threading

import pytest

from trusty.models.messages import AssistantMessage, ToolCall


class ScriptedBackend:
    """A fake ChatBackend that returns canned replies in order and records calls.

    Each scripted item is either an AssistantMessage to return, an exception
    to raise, or a callable taking (messages, tools, timeout) whose return
    value is used.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[dict] = []
        self.closed = False

    def chat(self, messages, tools=None, *, timeout=None):
        self.calls.append({
            "messages": list(messages),
            "tools": list(tools) if tools else None,
            "timeout": timeout,
        })
        if not self.replies:
            raise AssertionError("ScriptedBackend ran out of replies")
        item = self.replies.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(messages, tools, timeout)
        return item

    def close(self):
        self.closed = True


class FakeLookup:
    """A fake report lookup returning a fixed body and recording fetches."""

    def __init__(self, body: str | BaseException = '{"score": 0.9}'):
        self.body = body
        self.fetches: list[tuple[str, str]] = []

    def fetch(self, package_name, ecosystem):
        self.fetches.append((package_name, ecosystem))
        if isinstance(self.body, BaseException):
            raise self.body
        return self.body


def text_reply(text: str) -> AssistantMessage:
    """Assistant reply with no tool calls."""
    return AssistantMessage(content=text)


def tool_reply(*calls: tuple[str, dict], content: str = "") -> AssistantMessage:
    """Assistant reply requesting the given (name, arguments) tool calls."""
    return AssistantMessage(
        content=content,
        tool_calls=tuple(
            ToolCall(id=f"call_{i}", name=name, arguments=args)
            for i, (name, args) in enumerate(calls)
        ),
    )


def sleeper(event: threading.Event, reply: AssistantMessage):
    """Scripted item that blocks until ``event`` is set, then returns ``reply``."""

    def _wait(messages, tools, timeout):
        event.wait(5)
        return reply

    return _wait


@pytest.fixture
def lookup():
    return FakeLookup()


@pytest.fixture
def clean_env(monkeypatch):
    """Keep the developer's environment out of config resolution."""
    for var in (
        "TRUSTY_CONFIG",
        "TRUSTY_BACKEND_PROVIDER",
        "TRUSTY_BACKEND_HOST",
        "TRUSTY_BACKEND_MODEL",
        "TRUSTY_OPENAI_API_KEY",
        "TRUSTY_REPORT_URL",
        "TRUSTY_TURN_TIMEOUT",
        "TRUSTY_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
