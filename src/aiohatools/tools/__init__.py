"""Tool groups and registry assembly."""

from __future__ import annotations

from ..backends.base import BackendClient
from ..query import QueryEngine
from ..registry import ToolRegistry
from .automations import AUTOMATIONS, AutomationTools
from .base import ToolGroup
from .dashboards import VIEWS, DashboardTools
from .entities import ENTITIES, EntityTools
from .helpers import HELPERS, HelperTools, helper_service_call
from .scenes import SCENES, SceneTools
from .scripts import SCRIPTS, ScriptTools

TOOL_GROUPS: tuple[type[ToolGroup], ...] = (
    EntityTools,
    AutomationTools,
    ScriptTools,
    SceneTools,
    HelperTools,
    DashboardTools,
)


def build_registry(client: BackendClient, *, max_concurrent_fetches: int = 8) -> ToolRegistry:
    """Return a registry holding every tool, bound to *client*."""
    engine = QueryEngine(client, max_concurrent_fetches=max_concurrent_fetches)
    registry = ToolRegistry()
    for group in TOOL_GROUPS:
        group(client, engine).register(registry)
    registry.log_registered_tools()
    return registry


__all__ = [
    "AUTOMATIONS",
    "ENTITIES",
    "HELPERS",
    "SCENES",
    "SCRIPTS",
    "TOOL_GROUPS",
    "VIEWS",
    "AutomationTools",
    "DashboardTools",
    "EntityTools",
    "HelperTools",
    "SceneTools",
    "ScriptTools",
    "ToolGroup",
    "build_registry",
    "helper_service_call",
]
