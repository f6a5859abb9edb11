"""Built-in httpx chat backends with tenacity retry.

Provides sync HTTP clients for Ollama's ``/api/chat`` endpoint and for
OpenAI-compatible chat completion APIs. Both translate between Trusty's
message models and the provider wire format, and map HTTP failures onto
the BackendError hierarchy.

Retries are opt-in: ``max_retries`` counts attempts, and the default of 1
means a failed call is surfaced immediately.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import httpx
import tenacity

from trusty.exceptions import BackendError
from trusty.llm.errors import (
    BackendAuthError,
    BackendConfigError,
    BackendRateLimitError,
    BackendResponseError,
    BackendTimeoutError,
)
from trusty.models.messages import AssistantMessage, ToolCall, to_ollama, to_openai

if TYPE_CHECKING:
    from trusty.conversation import AnyMessage
    from trusty.toolkit.models import ToolDescriptor

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 500, 502, 503, 504, connection errors.
    Not retryable: 401, 403, 400, other client errors, read timeouts.
    """
    if isinstance(exc, BackendAuthError):
        return False
    if isinstance(exc, BackendRateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


class _HTTPChatBackend(ABC):
    """Shared request, retry and error-mapping logic for HTTP backends."""

    provider = "http"

    def __init__(
        self,
        base_url: str,
        model: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float = 120.0,
        max_retries: int = 1,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._max_retries = max(1, max_retries)
        self._client = httpx.Client(
            timeout=timeout,
            headers={"Content-Type": "application/json", **(headers or {})},
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._model

    def chat(
        self,
        messages: Sequence[AnyMessage],
        tools: Sequence[ToolDescriptor] | None = None,
        *,
        timeout: float | None = None,
    ) -> AssistantMessage:
        """Send one chat request and return the assistant reply.

        Args:
            messages: Conversation history, oldest first.
            tools: Tool descriptors to offer, or None to disable tool use.
            timeout: Per-request HTTP timeout in seconds; the client
                default applies when None.

        Raises:
            BackendAuthError: On 401/403 (no retry).
            BackendRateLimitError: On 429 after all attempts.
            BackendTimeoutError: When the HTTP request times out.
            BackendResponseError: On an unexpected response format.
            BackendError: On any other transport or HTTP failure.
        """
        payload = self._build_payload(messages, tools)
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=(
                tenacity.wait_exponential(multiplier=1, min=1, max=30)
                + tenacity.wait_random(0, 2)
            ),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            data = retryer(self._post, payload, timeout)
        except httpx.TimeoutException as exc:
            raise BackendTimeoutError(
                f"{self.provider} request timed out: {exc}"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise BackendError(
                f"{self.provider} request failed: HTTP "
                f"{exc.response.status_code} - {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BackendError(f"{self.provider} request failed: {exc}") from exc
        return self._parse_reply(data)

    def _post(self, payload: dict[str, Any], timeout: float | None) -> dict:
        """Execute a single request (no retry)."""
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        response = self._client.post(
            f"{self._base_url}{self._endpoint()}", json=payload, **kwargs
        )

        if response.status_code in _AUTH_ERROR_STATUS_CODES:
            raise BackendAuthError(
                f"Authentication failed: HTTP {response.status_code} - "
                f"{response.text}"
            )

        if response.status_code == 429:
            retry_after_raw = response.headers.get("Retry-After")
            retry_after: float | None = None
            if retry_after_raw is not None:
                try:
                    retry_after = float(retry_after_raw)
                except (ValueError, TypeError):
                    pass
            raise BackendRateLimitError(
                f"Rate limited: HTTP 429 - {response.text}",
                retry_after=retry_after,
            )

        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as exc:
            raise BackendResponseError(
                f"Response is not JSON: {response.text[:200]}"
            ) from exc
        if not isinstance(data, dict):
            raise BackendResponseError(f"Unexpected response format: {data!r}")
        return data

    @abstractmethod
    def _endpoint(self) -> str:
        """Path appended to the base URL."""

    @abstractmethod
    def _build_payload(
        self,
        messages: Sequence[AnyMessage],
        tools: Sequence[ToolDescriptor] | None,
    ) -> dict[str, Any]:
        """Render the request body in the provider wire format."""

    @abstractmethod
    def _parse_reply(self, data: dict) -> AssistantMessage:
        """Extract the assistant message from a decoded response."""

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class OllamaClient(_HTTPChatBackend):
    """Sync httpx client for Ollama's chat API.

    Usage::

        with OllamaClient("http://localhost:11434", "qwen2.5") as client:
            reply = client.chat([UserMessage(content="Hello")])
            print(reply.content)
    """

    provider = "ollama"

    def _endpoint(self) -> str:
        return "/api/chat"

    def _build_payload(
        self,
        messages: Sequence[AnyMessage],
        tools: Sequence[ToolDescriptor] | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [to_ollama(m) for m in messages],
            "stream": False,
        }
        if tools:
            payload["tools"] = [t.to_ollama() for t in tools]
        return payload

    def _parse_reply(self, data: dict) -> AssistantMessage:
        message = data.get("message")
        if not isinstance(message, dict):
            raise BackendResponseError(
                f"Unexpected response format: missing 'message' key. "
                f"Response: {data}"
            )
        raw_calls = message.get("tool_calls") or []
        return AssistantMessage(
            content=message.get("content") or "",
            tool_calls=tuple(ToolCall.from_ollama(tc) for tc in raw_calls),
        )


class OpenAIClient(_HTTPChatBackend):
    """Sync httpx client for OpenAI-compatible chat completions.

    Reads the API key from the constructor or the TRUSTY_OPENAI_API_KEY
    environment variable.
    """

    provider = "openai"

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 120.0,
        max_retries: int = 1,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the OpenAI-compatible client.

        Raises:
            BackendConfigError: If no API key is provided or found in environment.
        """
        key = api_key or os.environ.get("TRUSTY_OPENAI_API_KEY", "")
        if not key:
            raise BackendConfigError(
                "No API key provided. Pass api_key= or set TRUSTY_OPENAI_API_KEY "
                "environment variable."
            )
        super().__init__(
            base_url or "https://api.openai.com/v1",
            model,
            headers={"Authorization": f"Bearer {key}"},
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )

    def _endpoint(self) -> str:
        return "/chat/completions"

    def _build_payload(
        self,
        messages: Sequence[AnyMessage],
        tools: Sequence[ToolDescriptor] | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [to_openai(m) for m in messages],
        }
        if tools:
            payload["tools"] = [t.to_openai() for t in tools]
        return payload

    def _parse_reply(self, data: dict) -> AssistantMessage:
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise BackendResponseError(
                f"Cannot extract message from response: {exc}. "
                f"Response: {data}"
            ) from exc
        raw_calls = message.get("tool_calls") or []
        return AssistantMessage(
            content=message.get("content") or "",
            tool_calls=tuple(ToolCall.from_openai(tc) for tc in raw_calls),
        )
