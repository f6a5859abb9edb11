"""Trusty: a tool-assisted dependency advisor.

Asks a chat model whether a package is safe to use, lets the model call the
Trusty package report as a tool, and turns the result into a one-paragraph
recommendation.
"""

from trusty.config import load_config
from trusty.conversation import ConversationState
from trusty.exceptions import (
    ArgumentError,
    BackendError,
    ConfigError,
    DuplicateToolError,
    MessageValidationError,
    ReportLookupError,
    TrustyError,
    TurnTimeoutError,
    UnexpectedToolError,
)
from trusty.models import (
    AssistantMessage,
    BackendConfig,
    ReportConfig,
    ToolCall,
    ToolMessage,
    TrustyConfig,
    UserMessage,
    validate_message,
)
from trusty.orchestrator import Orchestrator, OrchestratorConfig, OrchestratorResult, TurnState
from trusty.report import ReportClient
from trusty.toolkit import (
    TRUSTY_REPORT,
    ToolDescriptor,
    ToolRegistry,
    ToolResult,
    TrustyReportTool,
    describe,
)

__all__ = [
    # Orchestration
    "Orchestrator",
    "OrchestratorConfig",
    "OrchestratorResult",
    "TurnState",
    "ConversationState",
    # Messages
    "AssistantMessage",
    "ToolCall",
    "ToolMessage",
    "UserMessage",
    "validate_message",
    # Tools
    "TRUSTY_REPORT",
    "ReportClient",
    "ToolDescriptor",
    "ToolRegistry",
    "ToolResult",
    "TrustyReportTool",
    "describe",
    # Config
    "BackendConfig",
    "ReportConfig",
    "TrustyConfig",
    "load_config",
    # Errors
    "ArgumentError",
    "BackendError",
    "ConfigError",
    "DuplicateToolError",
    "MessageValidationError",
    "ReportLookupError",
    "TrustyError",
    "TurnTimeoutError",
    "UnexpectedToolError",
]
