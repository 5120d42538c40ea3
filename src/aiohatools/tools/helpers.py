"""Helper tools shared by every helper platform."""

from __future__ import annotations

from typing import Any

from ..backends.base import KIND_HELPER
from ..exceptions import BackendError, ToolArgumentError
from ..models.config import ServiceCallSpec
from ..models.records import FilterCriteria, ListingKind
from ..models.schema import SchemaNode, boolean_schema, object_schema, string_schema
from ..models.tools import ToolCallResult, ToolDefinition
from ..platforms import HELPER_PLATFORMS, is_helper_platform, parse_helper_entity_id
from ..registry import ToolHandler
from ._args import optional_bool, optional_string, require_string
from .base import ToolGroup

HELPERS = ListingKind(kind=KIND_HELPER, noun="helpers", name_key="name", alias_matches_id=True)

_HELPER_ENTITY_ID = string_schema("The helper entity ID (e.g., input_boolean.my_switch)")

LIST_HELPERS = ToolDefinition(
    name="list_helpers",
    description=(
        "List helpers in Home Assistant (input_boolean, input_number, counter, timer, ...). "
        "By default returns a compact list; use 'verbose' for the full configuration."
    ),
    input_schema=object_schema(
        {
            "platform": string_schema("Only list helpers of this platform", enum=list(HELPER_PLATFORMS)),
            "name_contains": string_schema("Filter by entity_id or name (case-insensitive, partial match)"),
            "verbose": boolean_schema("If true, return the full helper configuration"),
        },
        description="Filter and output options for helpers list",
    ),
)

DELETE_HELPER = ToolDefinition(
    name="delete_helper",
    description="Delete a helper of any supported platform",
    input_schema=object_schema({"entity_id": _HELPER_ENTITY_ID}, required=["entity_id"]),
)

SET_HELPER_VALUE = ToolDefinition(
    name="set_helper_value",
    description=(
        "Set the value of a helper: true/false for input_boolean, a number for input_number "
        "and counter, text for input_text, an option for input_select, a date/time string for "
        "input_datetime. input_button ignores the value and is pressed."
    ),
    input_schema=object_schema(
        {
            "entity_id": _HELPER_ENTITY_ID,
            "value": SchemaNode(type="string", description="New value; type depends on the platform"),
        },
        required=["entity_id"],
    ),
)


def _require_helper(entity_id: str) -> str:
    platform, _ = parse_helper_entity_id(entity_id)
    if not platform:
        raise ToolArgumentError(
            f"'{entity_id}' is not a helper entity_id (expected e.g. input_boolean.my_switch)"
        )
    return platform


def helper_service_call(entity_id: str, value: Any) -> ServiceCallSpec:
    """Map a helper value assignment to the service call that performs it."""
    platform = _require_helper(entity_id)
    data: dict[str, Any] = {"entity_id": entity_id}

    if platform == "input_boolean":
        if not isinstance(value, bool):
            raise ToolArgumentError("value must be true or false for input_boolean")
        return ServiceCallSpec(domain=platform, service="turn_on" if value else "turn_off", data=data)
    if platform == "input_button":
        return ServiceCallSpec(domain=platform, service="press", data=data)
    if value is None:
        raise ToolArgumentError("value is required")
    if platform in ("input_number", "counter"):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ToolArgumentError(f"value must be a number for {platform}")
        return ServiceCallSpec(domain=platform, service="set_value", data={**data, "value": value})
    if platform == "input_text":
        return ServiceCallSpec(domain=platform, service="set_value", data={**data, "value": str(value)})
    if platform == "input_select":
        return ServiceCallSpec(domain=platform, service="select_option", data={**data, "option": str(value)})
    if platform == "input_datetime":
        return ServiceCallSpec(domain=platform, service="set_datetime", data={**data, "datetime": str(value)})
    raise ToolArgumentError(f"Setting a value is not supported for {platform} helpers")


class HelperTools(ToolGroup):
    def tools(self) -> list[tuple[ToolDefinition, ToolHandler]]:
        return [
            (LIST_HELPERS, self.list_helpers),
            (DELETE_HELPER, self.delete_helper),
            (SET_HELPER_VALUE, self.set_helper_value),
        ]

    async def list_helpers(self, args: dict[str, Any]) -> ToolCallResult:
        platform = optional_string(args, "platform")
        if platform and not is_helper_platform(platform):
            raise ToolArgumentError(
                f"Unknown helper platform '{platform}'. Valid platforms: {', '.join(HELPER_PLATFORMS)}"
            )
        criteria = FilterCriteria(domain=platform, alias_contains=optional_string(args, "name_contains"))
        return await self.engine.list_tool(HELPERS, criteria, verbose=optional_bool(args, "verbose"))

    async def delete_helper(self, args: dict[str, Any]) -> ToolCallResult:
        entity_id = require_string(args, "entity_id")
        platform = _require_helper(entity_id)
        try:
            await self.client.delete(KIND_HELPER, entity_id)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error deleting {platform}: {exc}")
        return ToolCallResult.success(f"Helper '{entity_id}' deleted successfully")

    async def set_helper_value(self, args: dict[str, Any]) -> ToolCallResult:
        entity_id = require_string(args, "entity_id")
        call = helper_service_call(entity_id, args.get("value"))
        try:
            await self.client.call_service(call.domain, call.service, call.data)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error setting {call.domain} value: {exc}")
        return ToolCallResult.success(f"Helper '{entity_id}' updated via {call.domain}.{call.service}")
