"""ToolRegistry: name -> invoker lookup for the orchestrator."""

from __future__ import annotations

from trusty.exceptions import DuplicateToolError, UnexpectedToolError
from trusty.toolkit.models import ToolDescriptor, ToolInvoker


class ToolRegistry:
    """Holds the tools the model may call, in registration order.

    Usage::

        registry = ToolRegistry([TrustyReportTool(report_client)])
        backend.chat(messages, tools=registry.descriptors())
        invoker = registry.resolve(call.name)
    """

    def __init__(self, invokers: list[ToolInvoker] | None = None) -> None:
        self._invokers: dict[str, ToolInvoker] = {}
        for invoker in invokers or []:
            self.register(invoker)

    def register(self, invoker: ToolInvoker) -> None:
        """Register a tool under its descriptor's name.

        Raises:
            DuplicateToolError: If the name is already registered.
        """
        name = invoker.descriptor.name
        if name in self._invokers:
            raise DuplicateToolError(name)
        self._invokers[name] = invoker

    def resolve(self, name: str) -> ToolInvoker:
        """Return the invoker for ``name``.

        Raises:
            UnexpectedToolError: If no tool with that name is registered.
        """
        invoker = self._invokers.get(name)
        if invoker is None:
            raise UnexpectedToolError(name)
        return invoker

    def descriptors(self) -> list[ToolDescriptor]:
        return [inv.descriptor for inv in self._invokers.values()]

    def names(self) -> list[str]:
        return list(self._invokers)

    def __contains__(self, name: object) -> bool:
        return name in self._invokers

    def __len__(self) -> int:
        return len(self._invokers)
