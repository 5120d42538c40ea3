"""Entity state tools."""

from __future__ import annotations

from typing import Any

from ..backends.base import KIND_ENTITY
from ..exceptions import BackendError
from ..models.records import FilterCriteria, ListingKind
from ..models.schema import boolean_schema, object_schema, string_schema
from ..models.tools import ToolCallResult, ToolDefinition
from ..references import referenced_sections
from ..registry import ToolHandler
from ._args import optional_bool, optional_string, require_string, to_json
from .automations import AUTOMATIONS
from .base import ToolGroup

ENTITIES = ListingKind(
    kind=KIND_ENTITY,
    noun="entities",
    alias_matches_id=True,
)

GET_STATES = ToolDefinition(
    name="get_states",
    description=(
        "Get all entity states from Home Assistant. By default returns a compact list with "
        "entity_id, state, and friendly_name. Use 'verbose' for full details including all attributes."
    ),
    input_schema=object_schema(
        {
            "domain": string_schema("Filter by domain (e.g., 'light', 'switch', 'sensor')"),
            "state": string_schema("Filter by state value (e.g., 'on', 'off', 'unavailable', 'unknown')"),
            "state_not": string_schema(
                "Exclude entities with this state (e.g., 'unavailable' to exclude unavailable entities)"
            ),
            "name_contains": string_schema(
                "Filter by entity_id or friendly_name containing this string (case-insensitive)"
            ),
            "verbose": boolean_schema(
                "If true, return full details (all attributes). Default: false "
                "(compact output with entity_id, state, friendly_name only)"
            ),
        },
        description="Optional filters for entity states",
    ),
)

GET_STATE = ToolDefinition(
    name="get_state",
    description="Get the state of a specific entity",
    input_schema=object_schema(
        {"entity_id": string_schema("The entity ID (e.g., 'light.living_room')")},
        required=["entity_id"],
    ),
)

LIST_DOMAINS = ToolDefinition(
    name="list_domains",
    description="List all available entity domains in Home Assistant",
    input_schema=object_schema(description="No parameters required"),
)

GET_ENTITY_DEPENDENCIES = ToolDefinition(
    name="get_entity_dependencies",
    description=(
        "Find all automations that use a specific entity. Shows where the entity is used as "
        "trigger, condition, or action target."
    ),
    input_schema=object_schema(
        {
            "entity_id": string_schema(
                "The entity ID to search for (e.g., 'binary_sensor.motion_living_room')"
            )
        },
        required=["entity_id"],
    ),
)


class EntityTools(ToolGroup):
    """Entity state listing and dependency lookup."""

    def tools(self) -> list[tuple[ToolDefinition, ToolHandler]]:
        return [
            (GET_STATES, self.get_states),
            (GET_STATE, self.get_state),
            (LIST_DOMAINS, self.list_domains),
            (GET_ENTITY_DEPENDENCIES, self.get_entity_dependencies),
        ]

    async def get_states(self, args: dict[str, Any]) -> ToolCallResult:
        criteria = FilterCriteria(
            domain=optional_string(args, "domain"),
            state=optional_string(args, "state"),
            state_not=optional_string(args, "state_not"),
            alias_contains=optional_string(args, "name_contains"),
        )
        try:
            result = await self.engine.run(
                ENTITIES, criteria, verbose=optional_bool(args, "verbose")
            )
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting states: {exc}")
        return result.to_tool_result()

    async def get_state(self, args: dict[str, Any]) -> ToolCallResult:
        entity_id = require_string(args, "entity_id")
        try:
            record = await self.client.fetch_one(KIND_ENTITY, entity_id)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting state: {exc}")
        return ToolCallResult.success(to_json(self.engine.project_verbose(record, ENTITIES)))

    async def list_domains(self, args: dict[str, Any]) -> ToolCallResult:
        try:
            records = await self.engine.fetch(ENTITIES)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting states: {exc}")

        domains = sorted({record.domain for record in records if record.domain})
        return ToolCallResult.success(f"Found {len(domains)} domains\n\n{to_json(domains)}")

    async def get_entity_dependencies(self, args: dict[str, Any]) -> ToolCallResult:
        entity_id = require_string(args, "entity_id")
        try:
            automations = await self.engine.fetch(AUTOMATIONS)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error listing automations: {exc}")

        dependencies = []
        for record in await self.engine.load_configs(AUTOMATIONS, automations):
            if record is None:
                continue
            used_in = referenced_sections(record.config, entity_id)
            if not used_in:
                continue
            alias = (record.config or {}).get("alias") or record.display_name
            dependencies.append(
                {
                    "automation_id": record.entity_id.removeprefix("automation."),
                    "automation_alias": alias,
                    "used_in": used_in,
                }
            )

        result = {
            "entity_id": entity_id,
            "automations": dependencies,
            "total_usages": len(dependencies),
        }
        summary = f"Found {len(dependencies)} automations using '{entity_id}'"
        return ToolCallResult.success(f"{summary}\n\n{to_json(result)}")
