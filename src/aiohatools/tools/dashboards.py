"""Lovelace dashboard tools."""

from __future__ import annotations

from typing import Any

from ..backends.base import KIND_VIEW
from ..exceptions import BackendError
from ..models.records import FilterCriteria, ListingKind
from ..models.schema import boolean_schema, object_schema, string_schema
from ..models.tools import ToolCallResult, ToolDefinition
from ..registry import ToolHandler
from ._args import optional_bool, optional_string
from .base import ToolGroup

VIEWS = ListingKind(
    kind=KIND_VIEW,
    noun="views",
    id_key="path",
    name_key="title",
    alias_matches_id=True,
    compact_attributes=("icon", "card_count", "badge_count", "subview"),
)

GET_LOVELACE_CONFIG = ToolDefinition(
    name="get_lovelace_config",
    description=(
        "Get the Lovelace dashboard configuration. By default returns a compact overview of views. "
        "Use 'view' filter to get a specific view, and 'verbose' for full details."
    ),
    input_schema=object_schema(
        {
            "view": string_schema(
                "Filter by view path or title (case-insensitive, partial match). "
                "Returns full details for matching views."
            ),
            "verbose": boolean_schema(
                "If true, return full configuration including all cards. Default: false "
                "(compact overview with view names and card counts)"
            ),
        },
        description="Filter and output options for Lovelace configuration",
    ),
)


class DashboardTools(ToolGroup):
    def tools(self) -> list[tuple[ToolDefinition, ToolHandler]]:
        return [(GET_LOVELACE_CONFIG, self.get_lovelace_config)]

    async def get_lovelace_config(self, args: dict[str, Any]) -> ToolCallResult:
        view = optional_string(args, "view")
        verbose = optional_bool(args, "verbose") or bool(view)
        try:
            result = await self.engine.run(
                VIEWS, FilterCriteria(alias_contains=view), verbose=verbose
            )
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting Lovelace config: {exc}")

        # A view filter with no match is an answer, not a failure.
        if view and not result.count:
            return ToolCallResult.success(f"No views found matching '{view}'")
        return result.to_tool_result()
