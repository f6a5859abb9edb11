"""The trustyReport tool: descriptor and invoker.

The model calls ``trustyReport`` with a package name and ecosystem; the
invoker fetches the Trusty report and returns it as indented JSON text so
vendor formatting never reaches the model context verbatim.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from trusty.exceptions import ReportLookupError
from trusty.toolkit.models import ToolDescriptor, ToolResult
from trusty.toolkit.validation import validate_arguments

logger = logging.getLogger(__name__)

TRUSTY_REPORT = ToolDescriptor(
    name="trustyReport",
    description="Evaluate the trustworthiness of a package",
    parameters={
        "package_name": {
            "type": "string",
            "description": "The name of the package",
        },
        "ecosystem": {
            "type": "string",
            "description": "The ecosystem of the package",
        },
    },
    required=("package_name", "ecosystem"),
)


def describe() -> ToolDescriptor:
    """Return the trustyReport descriptor."""
    return TRUSTY_REPORT


def _reject_constant(name: str) -> None:
    raise ValueError(f"non-standard JSON constant {name}")


class ReportLookup(Protocol):
    def fetch(self, package_name: str, ecosystem: str) -> str:
        ...


class TrustyReportTool:
    """Invoker for ``trustyReport`` backed by a report lookup."""

    descriptor = TRUSTY_REPORT

    def __init__(self, lookup: ReportLookup) -> None:
        self._lookup = lookup

    def invoke(self, arguments: Mapping[str, Any]) -> ToolResult:
        """Validate arguments, fetch the report, and normalize it.

        Raises:
            ArgumentError: If package_name or ecosystem is missing or not a string.
            ReportLookupError: If the fetch fails or the body is not a JSON object.
        """
        args = validate_arguments(self.descriptor, arguments)
        package_name = args["package_name"]
        ecosystem = args["ecosystem"]

        raw = self._lookup.fetch(package_name, ecosystem)
        try:
            report = json.loads(raw, parse_constant=_reject_constant)
        except (ValueError, TypeError, RecursionError) as exc:
            raise ReportLookupError(
                f"Report for {ecosystem}/{package_name} is not valid JSON: {exc}"
            ) from exc
        if not isinstance(report, dict):
            raise ReportLookupError(
                f"Report for {ecosystem}/{package_name} is not a JSON object"
            )

        try:
            content = json.dumps(report, indent=2, allow_nan=False)
        except (ValueError, RecursionError) as exc:
            # e.g. 1e999 parses to inf
            raise ReportLookupError(
                f"Report for {ecosystem}/{package_name} is not valid JSON: {exc}"
            ) from exc

        logger.debug("Report for %s/%s has %d keys", ecosystem, package_name, len(report))
        return ToolResult(tool_name=self.descriptor.name, content=content)
