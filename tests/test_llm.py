"""Tests for the trusty.llm package.

Tests cover:
- OllamaClient: request formatting, reply parsing, tool calls
- OpenAIClient: request formatting, auth header, env config
- Error mapping: auth, rate limit, timeout, bad shapes, other HTTP failures
- Retry behavior: off by default, opt-in via max_retries
- ChatBackend protocol and create_backend factory
"""

from __future__ import annotations

import json
from unittest.mock import patch

import httpx
import pytest

from trusty.exceptions import BackendError, TrustyError
from trusty.llm import (
    BackendAuthError,
    BackendConfigError,
    BackendRateLimitError,
    BackendResponseError,
    BackendTimeoutError,
    ChatBackend,
    OllamaClient,
    OpenAIClient,
    create_backend,
)
from trusty.llm.client import _HTTPChatBackend
from trusty.models.config import BackendConfig
from trusty.models.messages import AssistantMessage, ToolCall, ToolMessage, UserMessage
from trusty.toolkit import TRUSTY_REPORT

pytestmark = pytest.mark.usefixtures("clean_env")


# ---------------------------------------------------------------------------
# Fixtures and helpers
# ---------------------------------------------------------------------------


def _ollama_response(content: str = "Hello!", tool_calls: list | None = None) -> dict:
    """Build a realistic Ollama /api/chat response dict."""
    message: dict = {"role": "assistant", "content": content}
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    return {"model": "qwen2.5", "message": message, "done": True}


def _openai_response(content: str | None = "Hello!", tool_calls: list | None = None) -> dict:
    """Build a realistic OpenAI chat completion response dict."""
    message: dict = {"role": "assistant", "content": content}
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    return {
        "id": "chatcmpl-test123",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
    }


class _Recorder:
    """MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


def _ollama(recorder, **kwargs) -> OllamaClient:
    return OllamaClient(
        "http://ollama.test", "qwen2.5", transport=httpx.MockTransport(recorder), **kwargs
    )


def _openai(recorder, **kwargs) -> OpenAIClient:
    return OpenAIClient(
        api_key="test-key",
        base_url="http://openai.test/v1",
        transport=httpx.MockTransport(recorder),
        **kwargs,
    )


# ===========================================================================
# Error hierarchy tests
# ===========================================================================


class TestErrorHierarchy:
    """Verify the backend error hierarchy."""

    @pytest.mark.parametrize(
        "cls",
        [
            BackendConfigError,
            BackendRateLimitError,
            BackendAuthError,
            BackendResponseError,
            BackendTimeoutError,
        ],
    )
    def test_inherits_backend_error(self, cls):
        assert issubclass(cls, BackendError)
        assert issubclass(cls, TrustyError)

    def test_rate_limit_error_has_retry_after(self):
        err = BackendRateLimitError("rate limited", retry_after=30.0)
        assert err.retry_after == 30.0
        assert "30.0s" in str(err)

    def test_rate_limit_error_no_retry_after(self):
        err = BackendRateLimitError("rate limited")
        assert err.retry_after is None
        assert "retry after" not in str(err)

    def test_shared_backend_base_is_abstract(self):
        with pytest.raises(TypeError):
            _HTTPChatBackend("http://localhost", "m")

        class Partial(_HTTPChatBackend):
            def _endpoint(self):
                return "/chat"

        with pytest.raises(TypeError):
            Partial("http://localhost", "m")


# ===========================================================================
# OllamaClient
# ===========================================================================


class TestOllamaClient:
    """Ollama /api/chat request and reply handling."""

    def test_request_payload(self):
        rec = _Recorder(httpx.Response(200, json=_ollama_response()))
        with _ollama(rec) as client:
            client.chat([UserMessage(content="hi")], [TRUSTY_REPORT])

        req = rec.requests[0]
        assert req.method == "POST"
        assert req.url == "http://ollama.test/api/chat"
        payload = rec.payloads[0]
        assert payload["model"] == "qwen2.5"
        assert payload["stream"] is False
        assert payload["messages"] == [{"role": "user", "content": "hi"}]
        assert payload["tools"] == [TRUSTY_REPORT.to_ollama()]

    def test_no_tools_key_when_tools_none(self):
        rec = _Recorder(httpx.Response(200, json=_ollama_response()))
        with _ollama(rec) as client:
            client.chat([UserMessage(content="hi")], None)
        assert "tools" not in rec.payloads[0]

    def test_text_reply(self):
        rec = _Recorder(httpx.Response(200, json=_ollama_response("It is fine.")))
        with _ollama(rec) as client:
            reply = client.chat([UserMessage(content="hi")])
        assert reply.content == "It is fine."
        assert reply.tool_calls == ()

    def test_tool_call_reply(self):
        rec = _Recorder(
            httpx.Response(
                200,
                json=_ollama_response(
                    "",
                    tool_calls=[{
                        "function": {
                            "name": "trustyReport",
                            "arguments": {"package_name": "left-pad", "ecosystem": "npm"},
                        }
                    }],
                ),
            )
        )
        with _ollama(rec) as client:
            reply = client.chat([UserMessage(content="is left-pad safe")], [TRUSTY_REPORT])
        assert len(reply.tool_calls) == 1
        assert reply.tool_calls[0].name == "trustyReport"
        assert reply.tool_calls[0].arguments["ecosystem"] == "npm"

    def test_tool_message_serialized(self):
        rec = _Recorder(httpx.Response(200, json=_ollama_response()))
        with _ollama(rec) as client:
            client.chat([
                UserMessage(content="q"),
                ToolMessage(content='{"score": 0.9}', name="trustyReport"),
            ])
        assert rec.payloads[0]["messages"][1] == {"role": "tool", "content": '{"score": 0.9}'}

    def test_missing_message_key(self):
        rec = _Recorder(httpx.Response(200, json={"done": True}))
        with _ollama(rec) as client:
            with pytest.raises(BackendResponseError, match="missing 'message'"):
                client.chat([UserMessage(content="hi")])

    def test_null_content_becomes_empty(self):
        rec = _Recorder(httpx.Response(200, json={"message": {"role": "assistant", "content": None}}))
        with _ollama(rec) as client:
            assert client.chat([UserMessage(content="hi")]).content == ""

    def test_per_call_timeout_is_forwarded(self):
        seen = []

        def handler(request):
            seen.append(request.extensions.get("timeout"))
            return httpx.Response(200, json=_ollama_response())

        client = OllamaClient("http://ollama.test", "m", transport=httpx.MockTransport(handler))
        client.chat([UserMessage(content="hi")], timeout=7.5)
        client.close()
        assert seen[0]["read"] == 7.5


# ===========================================================================
# OpenAIClient
# ===========================================================================


class TestOpenAIClient:
    """OpenAI-compatible chat completions."""

    def test_request_shape(self):
        rec = _Recorder(httpx.Response(200, json=_openai_response()))
        with _openai(rec, model="gpt-4o-mini") as client:
            client.chat([UserMessage(content="hi")], [TRUSTY_REPORT])

        req = rec.requests[0]
        assert req.url == "http://openai.test/v1/chat/completions"
        assert req.headers["Authorization"] == "Bearer test-key"
        payload = rec.payloads[0]
        assert payload["model"] == "gpt-4o-mini"
        assert payload["tools"][0]["function"]["name"] == "trustyReport"
        assert "stream" not in payload

    def test_tool_call_reply_parses_json_arguments(self):
        rec = _Recorder(
            httpx.Response(
                200,
                json=_openai_response(
                    None,
                    tool_calls=[{
                        "id": "call_xyz",
                        "type": "function",
                        "function": {
                            "name": "trustyReport",
                            "arguments": '{"package_name": "requests", "ecosystem": "pypi"}',
                        },
                    }],
                ),
            )
        )
        with _openai(rec) as client:
            reply = client.chat([UserMessage(content="q")], [TRUSTY_REPORT])
        assert reply.content == ""
        assert reply.tool_calls[0] == ToolCall(
            id="call_xyz",
            name="trustyReport",
            arguments={"package_name": "requests", "ecosystem": "pypi"},
        )

    def test_assistant_tool_calls_sent_back(self):
        rec = _Recorder(httpx.Response(200, json=_openai_response()))

        call = ToolCall(id="call_1", name="trustyReport", arguments={"package_name": "x"})
        with _openai(rec) as client:
            client.chat([
                UserMessage(content="q"),
                AssistantMessage(tool_calls=(call,)),
                ToolMessage(content="{}", name="trustyReport", tool_call_id="call_1"),
            ])
        messages = rec.payloads[0]["messages"]
        assert messages[1]["tool_calls"][0]["id"] == "call_1"
        assert messages[2]["tool_call_id"] == "call_1"

    def test_missing_choices(self):
        rec = _Recorder(httpx.Response(200, json={"id": "x"}))
        with _openai(rec) as client:
            with pytest.raises(BackendResponseError, match="Cannot extract message"):
                client.chat([UserMessage(content="q")])

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("TRUSTY_OPENAI_API_KEY", "env-key")
        rec = _Recorder(httpx.Response(200, json=_openai_response()))
        client = OpenAIClient(transport=httpx.MockTransport(rec))
        client.chat([UserMessage(content="q")])
        client.close()
        assert rec.requests[0].headers["Authorization"] == "Bearer env-key"
        assert str(rec.requests[0].url) == "https://api.openai.com/v1/chat/completions"

    def test_missing_api_key(self):
        with pytest.raises(BackendConfigError, match="TRUSTY_OPENAI_API_KEY"):
            OpenAIClient()


# ===========================================================================
# Error mapping
# ===========================================================================


class TestErrorMapping:
    """HTTP failures map onto the BackendError hierarchy."""

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors(self, status):
        rec = _Recorder(httpx.Response(status, text="denied"))
        with _ollama(rec) as client:
            with pytest.raises(BackendAuthError, match=str(status)):
                client.chat([UserMessage(content="q")])

    def test_rate_limit(self):
        rec = _Recorder(httpx.Response(429, text="slow down", headers={"Retry-After": "12"}))
        with _ollama(rec) as client:
            with pytest.raises(BackendRateLimitError) as exc_info:
                client.chat([UserMessage(content="q")])
        assert exc_info.value.retry_after == 12.0

    def test_rate_limit_bad_retry_after(self):
        rec = _Recorder(httpx.Response(429, text="x", headers={"Retry-After": "soon"}))
        with _ollama(rec) as client:
            with pytest.raises(BackendRateLimitError) as exc_info:
                client.chat([UserMessage(content="q")])
        assert exc_info.value.retry_after is None

    def test_server_error(self):
        rec = _Recorder(httpx.Response(500, text="kaboom"))
        with _ollama(rec) as client:
            with pytest.raises(BackendError, match="HTTP 500") as exc_info:
                client.chat([UserMessage(content="q")])
        assert type(exc_info.value) is BackendError

    def test_read_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = OllamaClient("http://ollama.test", "m", transport=httpx.MockTransport(handler))
        with pytest.raises(BackendTimeoutError):
            client.chat([UserMessage(content="q")])
        client.close()

    def test_connect_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = OllamaClient("http://ollama.test", "m", transport=httpx.MockTransport(handler))
        with pytest.raises(BackendError, match="refused"):
            client.chat([UserMessage(content="q")])
        client.close()

    def test_non_json_body(self):
        rec = _Recorder(httpx.Response(200, text="<html>"))
        with _ollama(rec) as client:
            with pytest.raises(BackendResponseError, match="not JSON"):
                client.chat([UserMessage(content="q")])

    def test_non_object_json_body(self):
        rec = _Recorder(httpx.Response(200, json=[1, 2, 3]))
        with _openai(rec) as client:
            with pytest.raises(BackendResponseError):
                client.chat([UserMessage(content="q")])


# ===========================================================================
# Retry behavior
# ===========================================================================


class TestRetry:
    """Retries are off by default and opt-in via max_retries."""

    def test_no_retry_by_default(self):
        rec = _Recorder(
            httpx.Response(503, text="busy"),
            httpx.Response(200, json=_ollama_response()),
        )
        with _ollama(rec) as client:
            with pytest.raises(BackendError):
                client.chat([UserMessage(content="q")])
        assert len(rec.requests) == 1

    @patch("tenacity.nap.time.sleep", return_value=None)
    def test_retries_transient_errors_when_enabled(self, _sleep):
        rec = _Recorder(
            httpx.Response(503, text="busy"),
            httpx.Response(429, text="slow"),
            httpx.Response(200, json=_ollama_response("ok")),
        )
        with _ollama(rec, max_retries=3) as client:
            reply = client.chat([UserMessage(content="q")])
        assert reply.content == "ok"
        assert len(rec.requests) == 3

    @patch("tenacity.nap.time.sleep", return_value=None)
    def test_auth_error_not_retried(self, _sleep):
        rec = _Recorder(
            httpx.Response(401, text="denied"),
            httpx.Response(200, json=_ollama_response()),
        )
        with _ollama(rec, max_retries=3) as client:
            with pytest.raises(BackendAuthError):
                client.chat([UserMessage(content="q")])
        assert len(rec.requests) == 1

    @patch("tenacity.nap.time.sleep", return_value=None)
    def test_gives_up_after_max_retries(self, _sleep):
        rec = _Recorder(httpx.Response(500, text="down"))
        with _ollama(rec, max_retries=2) as client:
            with pytest.raises(BackendError, match="HTTP 500"):
                client.chat([UserMessage(content="q")])
        assert len(rec.requests) == 2


# ===========================================================================
# Protocol and factory
# ===========================================================================


class TestCreateBackend:
    """ChatBackend conformance and create_backend."""

    def test_clients_satisfy_protocol(self):
        ollama = OllamaClient("http://ollama.test", "m")
        openai = OpenAIClient(api_key="k")
        try:
            assert isinstance(ollama, ChatBackend)
            assert isinstance(openai, ChatBackend)
        finally:
            ollama.close()
            openai.close()

    def test_default_is_ollama_on_localhost(self):
        backend = create_backend(BackendConfig())
        try:
            assert isinstance(backend, OllamaClient)
            assert backend._base_url == "http://localhost:11434"
            assert backend.model == "qwen2.5"
        finally:
            backend.close()

    def test_ollama_custom_host(self):
        backend = create_backend(BackendConfig(host="http://gpu-box:11434/", model="llama3.1"))
        try:
            assert backend._base_url == "http://gpu-box:11434"
            assert backend.model == "llama3.1"
        finally:
            backend.close()

    def test_openai(self):
        backend = create_backend(
            BackendConfig(provider="openai", api_key="sk-test", model="gpt-4o-mini")
        )
        try:
            assert isinstance(backend, OpenAIClient)
            assert backend._base_url == "https://api.openai.com/v1"
        finally:
            backend.close()

    def test_openai_without_key(self):
        with pytest.raises(BackendConfigError):
            create_backend(BackendConfig(provider="openai"))
