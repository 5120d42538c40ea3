"""Common base for groups of related tools."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..backends.base import BackendClient
from ..models.tools import ToolDefinition
from ..query import QueryEngine
from ..registry import ToolHandler, ToolRegistry


class ToolGroup(ABC):
    """A set of tools sharing one backend client and query engine."""

    def __init__(self, client: BackendClient, engine: QueryEngine | None = None) -> None:
        self.client = client
        self.engine = engine or QueryEngine(client)

    @abstractmethod
    def tools(self) -> list[tuple[ToolDefinition, ToolHandler]]:
        """Return ``(definition, handler)`` pairs in registration order."""

    def register(self, registry: ToolRegistry) -> None:
        for tool, handler in self.tools():
            registry.register(tool, handler)
