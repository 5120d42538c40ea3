"""Tool registry and dispatch.

Tools are registered once, before the registry is handed to whatever serves
calling agents, and the lookup table is never mutated afterwards. Every
call returns a :class:`ToolCallResult`; failures are reported through
``is_error`` rather than raised, so callers see one response shape.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, NamedTuple

from .exceptions import DuplicateToolError, ToolArgumentError
from .models.tools import ToolCallResult, ToolDefinition

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolCallResult]]

MAX_DESCRIPTION_LEN = 80


class _ToolEntry(NamedTuple):
    tool: ToolDefinition
    handler: ToolHandler


def truncate_description(description: str, max_len: int = MAX_DESCRIPTION_LEN) -> str:
    if len(description) <= max_len:
        return description
    return description[: max_len - 3] + "..."


class ToolRegistry:
    """Name-keyed table of tool definitions and their handlers."""

    def __init__(self) -> None:
        self._tools: dict[str, _ToolEntry] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register(self, tool: ToolDefinition, handler: ToolHandler) -> None:
        """Register *handler* under ``tool.name``.

        Raises
        ------
        DuplicateToolError
            If a tool with the same name is already registered.
        """
        if tool.name in self._tools:
            raise DuplicateToolError(f"Tool '{tool.name}' is already registered.")
        logger.debug("Registering tool '%s'", tool.name)
        self._tools[tool.name] = _ToolEntry(tool, handler)

    def list_tools(self) -> list[ToolDefinition]:
        """Return all tools in registration order."""
        return [entry.tool for entry in self._tools.values()]

    def get_tool(self, name: str) -> ToolDefinition | None:
        entry = self._tools.get(name)
        return entry.tool if entry else None

    def tools_payload(self) -> list[dict[str, Any]]:
        """Return the discovery payload for every tool."""
        return [tool.to_dict() for tool in self.list_tools()]

    async def dispatch(self, name: str, args: Mapping[str, Any] | None = None) -> ToolCallResult:
        """Invoke the tool *name* with *args*.

        Unknown tools, malformed arguments and handler crashes all come back
        as results with ``is_error`` set. Cancellation is not intercepted.
        """
        entry = self._tools.get(name)
        if entry is None:
            logger.debug("Call to unknown tool '%s'", name)
            return ToolCallResult.failure(f"Unknown tool: {name}")

        if args is None:
            args = {}
        if not isinstance(args, Mapping):
            return ToolCallResult.failure(f"Arguments for tool '{name}' must be an object")

        try:
            logger.debug("Executing tool '%s' with args=%s", name, args)
            return await entry.handler(dict(args))
        except ToolArgumentError as exc:
            return ToolCallResult.failure(str(exc))
        except Exception as exc:
            logger.exception("Unhandled error in tool '%s'", name)
            return ToolCallResult.failure(f"Tool '{name}' raised an error: {exc}")

    def log_registered_tools(self) -> None:
        """Log every registered tool at DEBUG level, sorted by name."""
        if not logger.isEnabledFor(logging.DEBUG):
            return

        logger.debug("Registered tools:")
        for name in sorted(self._tools):
            description = truncate_description(self._tools[name].tool.description)
            logger.debug("  - %s: %s", name, description)
