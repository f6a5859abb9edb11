"""Trusty exception hierarchy.

All Trusty-specific exceptions inherit from TrustyError. Every kind is
fatal to a run; the CLI is the only place that catches them.
"""

from __future__ import annotations


class TrustyError(Exception):
    """Base exception for all Trusty errors."""


class ConfigError(TrustyError):
    """Raised when the configuration file is unreadable or invalid."""


class MessageValidationError(TrustyError):
    """Raised when a message dict does not match any message variant.

    Named MessageValidationError (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """


class ArgumentError(TrustyError):
    """Raised when tool-call arguments are missing or mistyped."""

    def __init__(self, tool_name: str, field: str, reason: str) -> None:
        self.tool_name = tool_name
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid argument '{field}' for {tool_name}: {reason}")


class ReportLookupError(TrustyError):
    """Raised when the package report could not be fetched or decoded.

    Named ReportLookupError (not LookupError) to avoid shadowing the
    builtin.
    """


class UnexpectedToolError(TrustyError):
    """Raised when the model requests a tool that is not registered."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Unexpected function call: {tool_name}")


class DuplicateToolError(TrustyError):
    """Raised when a tool name is registered twice."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool already registered: {tool_name}")


class TurnTimeoutError(TrustyError, TimeoutError):
    """Raised when a model turn exceeds its time bound."""

    def __init__(self, turn: str, seconds: float) -> None:
        self.turn = turn
        self.seconds = seconds
        super().__init__(
            f"Timeout while waiting for the {turn} reply (limit: {seconds:g}s)"
        )


class BackendError(TrustyError):
    """Raised when a chat backend call fails for any other reason.

    Transport-specific subclasses live in ``trusty.llm.errors``.
    """
