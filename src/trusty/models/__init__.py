"""Domain models: role-tagged messages, tool calls and configuration."""

from trusty.models.config import BackendConfig, ReportConfig, TrustyConfig
from trusty.models.messages import (
    ArgumentValue,
    AssistantMessage,
    Message,
    ToolCall,
    ToolMessage,
    UserMessage,
    validate_message,
)

__all__ = [
    "ArgumentValue",
    "AssistantMessage",
    "BackendConfig",
    "Message",
    "ReportConfig",
    "ToolCall",
    "ToolMessage",
    "TrustyConfig",
    "UserMessage",
    "validate_message",
]
