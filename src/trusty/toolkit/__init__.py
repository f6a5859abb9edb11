"""Toolkit: tool descriptors, validation, registry and the trustyReport tool."""

from trusty.toolkit.definitions import TRUSTY_REPORT, TrustyReportTool, describe
from trusty.toolkit.models import ToolDescriptor, ToolInvoker, ToolResult
from trusty.toolkit.registry import ToolRegistry
from trusty.toolkit.validation import validate_arguments

__all__ = [
    "TRUSTY_REPORT",
    "ToolDescriptor",
    "ToolInvoker",
    "ToolRegistry",
    "ToolResult",
    "TrustyReportTool",
    "describe",
    "validate_arguments",
]
