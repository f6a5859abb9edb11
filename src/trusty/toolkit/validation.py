"""Tool-call argument validation.

Checks model-supplied arguments against a ToolDescriptor before any side
effect happens. Only the closed set of JSON-schema scalar types is
accepted for declared fields.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from trusty.exceptions import ArgumentError
from trusty.models.messages import ArgumentValue
from trusty.toolkit.models import ToolDescriptor

logger = logging.getLogger(__name__)


def _matches(value: object, json_type: str | None) -> bool:
    # bool is an int subclass; keep it out of the numeric types.
    if json_type == "string":
        return isinstance(value, str)
    if json_type == "boolean":
        return isinstance(value, bool)
    if json_type == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if json_type == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, (str, int, float, bool))


def validate_arguments(
    descriptor: ToolDescriptor, arguments: Mapping[str, Any]
) -> dict[str, ArgumentValue]:
    """Return the declared arguments after checking presence and types.

    Undeclared keys are dropped.

    Raises:
        ArgumentError: If a required argument is missing or any declared
            argument has the wrong type.
    """
    if not isinstance(arguments, Mapping):
        raise ArgumentError(
            descriptor.name, "<arguments>", f"expected an object, got {type(arguments).__name__}"
        )

    for name in descriptor.required:
        if name not in arguments or arguments[name] is None:
            raise ArgumentError(descriptor.name, name, "missing required argument")

    validated: dict[str, ArgumentValue] = {}
    for name, spec in descriptor.parameters.items():
        if name not in arguments:
            continue
        value = arguments[name]
        json_type = spec.get("type")
        if not _matches(value, json_type):
            expected = json_type or "string, number or boolean"
            raise ArgumentError(
                descriptor.name,
                name,
                f"expected {expected}, got {type(value).__name__}",
            )
        validated[name] = value

    extra = sorted(set(arguments) - set(descriptor.parameters))
    if extra:
        logger.debug("Ignoring undeclared arguments for %s: %s", descriptor.name, extra)
    return validated
